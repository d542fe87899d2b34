"""Match event publishing and the inbound SOS request consumer."""

from .bus import EventBus, InMemoryEventBus, LoggingEventBus
from .consumer import SOSRequestConsumer
from .models import (
    MATCH_ACCEPTED,
    MATCH_CREATED,
    SOS_REQUEST_CREATED,
    EventError,
    EventPublishError,
    MatchEvent,
    PublishResult,
)
from .publisher import EventPublisher

__all__ = [
    "EventBus",
    "InMemoryEventBus",
    "LoggingEventBus",
    "SOSRequestConsumer",
    "EventPublisher",
    "MATCH_ACCEPTED",
    "MATCH_CREATED",
    "SOS_REQUEST_CREATED",
    "EventError",
    "EventPublishError",
    "MatchEvent",
    "PublishResult",
]
