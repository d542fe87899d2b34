"""Data models for orchestration runs."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from sos_matching.domain.models import Match
from sos_matching.events.models import PublishResult
from sos_matching.utils.timestamps import format_timestamp


@dataclass
class RunFailure:
    """A tolerated upstream failure during a run.

    Attributes:
        stage: disaster_lookup, skill_query, resource_query or status_update
        key: What was being fetched (disaster id, skill or resource tag, request id)
        error_type: Exception class name
        message: Exception message
    """

    stage: str
    key: str
    error_type: str
    message: str


@dataclass
class OrchestrationResult:
    """
    Everything one orchestration run produced.

    Attributes:
        request_id: SOS request that was matched
        run_id: Identifier stamped on every log line of the run
        started_at: UTC timestamp when the run began
        finished_at: UTC timestamp when the run ended
        disaster_type: Disaster type used for matching
        disaster_type_source: "request", "registry" or "default"
        skill_matches: Persisted skill matches, best score first
        resource_matches: Persisted resource matches, nearest first
        failures: Upstream failures that degraded the result
        publish_failures: match.created events that could not be published
        status_updated: Whether the SOS-request service acknowledged "matched"
        skipped: True when another live run held this request's lease
    """

    request_id: str
    run_id: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    disaster_type: Optional[str] = None
    disaster_type_source: Optional[str] = None
    skill_matches: List[Match] = field(default_factory=list)
    resource_matches: List[Match] = field(default_factory=list)
    failures: List[RunFailure] = field(default_factory=list)
    publish_failures: List[PublishResult] = field(default_factory=list)
    status_updated: bool = False
    skipped: bool = False

    @property
    def matches(self) -> List[Match]:
        """Skill matches followed by resource matches, in persistence order."""
        return self.skill_matches + self.resource_matches

    @property
    def had_failures(self) -> bool:
        return bool(self.failures or self.publish_failures)

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    def to_response(self) -> Dict[str, Any]:
        """Manual-match response body."""
        return {
            "requestId": self.request_id,
            "matches": [m.to_response() for m in self.skill_matches],
            "resourceMatches": [m.to_response() for m in self.resource_matches],
            "matchedAt": format_timestamp(self.finished_at or self.started_at),
            "skipped": self.skipped,
        }
