"""Best-effort publication of match lifecycle events.

Publishing never raises: a failed hand-off is logged and reported in the
returned PublishResult so callers can inspect it without aborting.
"""

from typing import Optional

from sos_matching.config.models import QueueConfig
from sos_matching.domain.models import Match
from sos_matching.logging import get_logger

from .bus import EventBus
from .models import MATCH_ACCEPTED, MATCH_CREATED, MatchEvent, PublishResult

logger = get_logger(__name__, component="publisher")


class EventPublisher:
    """Publishes match.created and match.accepted events."""

    def __init__(self, bus: EventBus, queues: Optional[QueueConfig] = None):
        self.bus = bus
        self.queues = queues or QueueConfig()

    def publish_match_created(self, match: Match) -> PublishResult:
        """Announce a new match on the notifications queue."""
        event = MatchEvent(
            event=MATCH_CREATED,
            data={
                "matchId": match.match_id,
                "requestId": match.request_id,
                "volunteerId": match.volunteer_id,
                "skillType": match.skill_type,
                "resourceType": match.resource_type,
            },
        )
        return self._publish(self.queues.notifications, event, match.match_id)

    def publish_match_accepted(self, match: Match) -> PublishResult:
        """Tell the SOS-request service a volunteer accepted."""
        event = MatchEvent(
            event=MATCH_ACCEPTED,
            data={
                "matchId": match.match_id,
                "requestId": match.request_id,
                "volunteerId": match.volunteer_id,
            },
        )
        return self._publish(self.queues.sos_requests, event, match.match_id)

    def _publish(self, queue: str, event: MatchEvent, match_id: str) -> PublishResult:
        try:
            self.bus.publish(queue, event.to_message())
        except Exception as e:
            logger.error(
                f"Failed to publish {event.event} for match {match_id}: {e}",
                extra={
                    "event": "publisher.publish.failed",
                    "event_name": event.event,
                    "queue": queue,
                    "match_id": match_id,
                    "error_type": type(e).__name__,
                },
            )
            return PublishResult(
                event=event.event, queue=queue, match_id=match_id, status="failed", error=str(e)
            )

        logger.info(
            f"Published {event.event} for match {match_id}",
            extra={
                "event": "publisher.publish.success",
                "event_name": event.event,
                "queue": queue,
                "match_id": match_id,
            },
        )
        return PublishResult(event=event.event, queue=queue, match_id=match_id, status="published")
