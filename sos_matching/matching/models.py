"""Data models for the matching engine.

Matchers return a MatchingOutcome: the ranked candidates plus the per-query
failures that were tolerated along the way.
"""

from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

from sos_matching.domain.models import ResourceCandidate, SkillCandidate

T = TypeVar("T")


@dataclass
class ScoredCandidate:
    """A skill candidate that passed filtering and the score threshold.

    Attributes:
        candidate: Registry record
        distance_km: Distance from the SOS location
        match_score: Score in [0, 10]
        trust_score: Trust used for scoring (5.0 when the registry omitted it)
    """

    candidate: SkillCandidate
    distance_km: float
    match_score: float
    trust_score: float

    @property
    def volunteer_id(self) -> str:
        return self.candidate.user_id

    @property
    def skill_type(self) -> str:
        return self.candidate.skill_type


@dataclass
class DistancedCandidate:
    """A resource candidate that passed filtering, ranked by distance."""

    candidate: ResourceCandidate
    distance_km: float

    @property
    def owner_id(self) -> str:
        return self.candidate.user_id

    @property
    def resource_type(self) -> str:
        return self.candidate.resource_type


@dataclass
class QueryOutcome(Generic[T]):
    """Result of one fan-out sub-query.

    Exactly one of ``value`` / ``error`` is meaningful; ``ok`` tells which.
    """

    key: str
    value: Optional[T] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_type(self) -> Optional[str]:
        return type(self.error).__name__ if self.error is not None else None


@dataclass
class MatchingOutcome(Generic[T]):
    """Ranked, truncated candidates plus the sub-queries that failed."""

    candidates: List[T] = field(default_factory=list)
    failures: List[QueryOutcome] = field(default_factory=list)

    @property
    def had_failures(self) -> bool:
        return bool(self.failures)
