"""Accept, reject, list and summarise matches."""

from typing import List, Optional

from sos_matching.domain.models import Match, MatchStats
from sos_matching.events.publisher import EventPublisher
from sos_matching.logging import get_logger
from sos_matching.logging.context import log_context
from sos_matching.persistence.database import get_session
from sos_matching.persistence.repositories import MatchRepository

logger = get_logger(__name__, component="lifecycle")


class MatchLifecycleService:
    """Volunteer-facing match operations.

    Only the volunteer a match was offered to can accept or reject it, and only
    while it is pending. Every refusal surfaces as MatchNotFoundError.
    """

    def __init__(self, publisher: EventPublisher):
        self.publisher = publisher

    def accept(self, match_id: str, volunteer_id: str) -> Match:
        """Accept a pending match and publish match.accepted.

        The event is published after the transaction commits. A failed publish
        is logged and does not undo the acceptance.

        Raises:
            MatchNotFoundError: Unknown match, wrong volunteer, or no longer pending
            PersistenceError: On database error
        """
        with log_context(match_id=match_id, volunteer_id=volunteer_id):
            with get_session() as session:
                match = MatchRepository(session).accept(match_id, volunteer_id)

            logger.info(
                f"Match {match_id} accepted",
                extra={"event": "match.accepted", "request_id": match.request_id},
            )
            self.publisher.publish_match_accepted(match)
            return match

    def reject(self, match_id: str, volunteer_id: str, reason: Optional[str] = None) -> Match:
        """Reject a pending match. No event is published.

        Raises:
            MatchNotFoundError: Unknown match, wrong volunteer, or no longer pending
            PersistenceError: On database error
        """
        with log_context(match_id=match_id, volunteer_id=volunteer_id):
            with get_session() as session:
                match = MatchRepository(session).reject(match_id, volunteer_id, reason)

            logger.info(
                f"Match {match_id} rejected",
                extra={
                    "event": "match.rejected",
                    "request_id": match.request_id,
                    "has_reason": bool(reason),
                },
            )
            return match

    def list_matches(self, request_id: str) -> List[Match]:
        """All matches for a request, best score first."""
        with get_session() as session:
            return MatchRepository(session).list_by_request(request_id)

    def get_stats(self) -> MatchStats:
        with get_session() as session:
            return MatchRepository(session).stats()

