"""Event envelopes, publish results and event exceptions."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

MATCH_CREATED = "match.created"
MATCH_ACCEPTED = "match.accepted"
SOS_REQUEST_CREATED = "sos.request.created"


class EventError(Exception):
    """Base exception for event-related errors."""

    pass


class EventPublishError(EventError):
    """Raised by a transport when a message could not be handed off."""

    def __init__(self, message: str, queue: Optional[str] = None):
        super().__init__(message)
        self.queue = queue


class MatchEvent(BaseModel):
    """``{"event": ..., "data": {...}}`` envelope used on every queue."""

    event: str = Field(..., min_length=1)
    data: Dict[str, Any] = Field(default_factory=dict)

    def to_message(self) -> Dict[str, Any]:
        # Keys with a None value are left out (a skill event has no resourceType)
        return {
            "event": self.event,
            "data": {k: v for k, v in self.data.items() if v is not None},
        }


@dataclass
class PublishResult:
    """Outcome of one publish attempt.

    Attributes:
        event: Event name
        queue: Destination queue
        match_id: Match the event is about
        status: "published" or "failed"
        error: Error message when the publish failed
    """

    event: str
    queue: str
    match_id: Optional[str]
    status: str  # "published", "failed"
    error: Optional[str] = None

    def is_success(self) -> bool:
        return self.status == "published"
