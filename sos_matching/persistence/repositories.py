"""Data access layer for matches and request leases.

Repositories wrap a Session, translate SQLAlchemyError into the
PersistenceError family and return domain models rather than ORM rows.
"""

from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from sos_matching.domain.models import Match, MatchStats, MatchStatus
from sos_matching.logging import get_logger
from sos_matching.utils.timestamps import (
    format_duration_hms,
    format_timestamp,
    parse_iso_datetime,
    utc_now,
)

from .exceptions import DataIntegrityError, MatchNotFoundError, PersistenceError
from .schema import LeaseModel, MatchModel

logger = get_logger(__name__, component="store")


class MatchRepository:
    """Repository for match records."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, match: Match) -> Match:
        """Insert a new match.

        Raises:
            DataIntegrityError: If match_id already exists or a column is invalid
            PersistenceError: On any other database error
        """
        try:
            model = MatchModel.from_domain(match)
            self.session.add(model)
            self.session.flush()
            return model.to_domain()
        except IntegrityError as e:
            logger.error(
                f"Integrity error inserting match {match.match_id}: {e}",
                extra={"event": "store.match.integrity_error", "match_id": match.match_id},
            )
            raise DataIntegrityError(f"Failed to insert match due to constraint violation: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error inserting match {match.match_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to insert match: {e}") from e

    def add_all(self, matches: Iterable[Match]) -> List[Match]:
        """Insert several matches in the current transaction, in order."""
        return [self.add(match) for match in matches]

    def get(self, match_id: str) -> Optional[Match]:
        """Fetch a match by id, or None."""
        try:
            model = self.session.get(MatchModel, match_id)
            return model.to_domain() if model is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving match {match_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve match: {e}") from e

    def list_by_request(self, request_id: str) -> List[Match]:
        """All matches for a request, highest score first.

        Ties are broken by creation order so the listing is stable.
        """
        try:
            stmt = (
                select(MatchModel)
                .where(MatchModel.request_id == request_id)
                .order_by(MatchModel.match_score.desc(), MatchModel.created_at.asc())
            )
            return [model.to_domain() for model in self.session.execute(stmt).scalars()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing matches for request {request_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list matches: {e}") from e

    def accept(self, match_id: str, volunteer_id: str, now: Optional[datetime] = None) -> Match:
        """Move a pending match owned by volunteer_id to accepted.

        The transition is a single conditional UPDATE, so two concurrent
        accepts cannot both succeed.

        Raises:
            MatchNotFoundError: If no pending match with that id belongs to volunteer_id
            PersistenceError: On database error
        """
        timestamp = format_timestamp(now or utc_now())
        return self._transition(
            match_id,
            volunteer_id,
            status=MatchStatus.ACCEPTED.value,
            accepted_at=timestamp,
            updated_at=timestamp,
        )

    def reject(
        self,
        match_id: str,
        volunteer_id: str,
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Match:
        """Move a pending match owned by volunteer_id to rejected.

        Raises:
            MatchNotFoundError: If no pending match with that id belongs to volunteer_id
            PersistenceError: On database error
        """
        timestamp = format_timestamp(now or utc_now())
        return self._transition(
            match_id,
            volunteer_id,
            status=MatchStatus.REJECTED.value,
            rejected_at=timestamp,
            rejection_reason=reason,
            updated_at=timestamp,
        )

    def _transition(self, match_id: str, volunteer_id: str, **values) -> Match:
        try:
            stmt = (
                update(MatchModel)
                .where(
                    MatchModel.match_id == match_id,
                    MatchModel.volunteer_id == volunteer_id,
                    MatchModel.status == MatchStatus.PENDING.value,
                )
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            result = self.session.execute(stmt)
            self.session.flush()

            if result.rowcount == 0:
                reason = self._diagnose(match_id, volunteer_id)
                logger.info(
                    f"Match {match_id} not transitioned to {values['status']}: {reason}",
                    extra={
                        "event": "store.match.transition_refused",
                        "match_id": match_id,
                        "volunteer_id": volunteer_id,
                        "target_status": values["status"],
                        "reason": reason,
                    },
                )
                raise MatchNotFoundError(match_id, reason=reason)

            model = self.session.get(MatchModel, match_id, populate_existing=True)
            return model.to_domain()

        except MatchNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error updating match {match_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update match: {e}") from e

    def _diagnose(self, match_id: str, volunteer_id: str) -> str:
        row = self.session.execute(
            select(MatchModel.volunteer_id, MatchModel.status).where(
                MatchModel.match_id == match_id
            )
        ).first()
        if row is None:
            return "not_found"
        if row.volunteer_id != volunteer_id:
            return "not_owner"
        return f"already_{row.status}"

    def stats(self) -> MatchStats:
        """Counts per status plus the mean accept latency as HH:MM:SS."""
        try:
            counts: Dict[str, int] = dict(
                self.session.execute(
                    select(MatchModel.status, func.count()).group_by(MatchModel.status)
                ).all()
            )

            # Timestamps are strings, so the mean is computed here rather than in SQL
            accepted_rows = self.session.execute(
                select(MatchModel.created_at, MatchModel.accepted_at).where(
                    MatchModel.status == MatchStatus.ACCEPTED.value,
                    MatchModel.accepted_at.is_not(None),
                )
            ).all()
        except SQLAlchemyError as e:
            logger.error(f"Error computing match statistics: {e}", exc_info=True)
            raise PersistenceError(f"Failed to compute match statistics: {e}") from e

        durations = []
        for created_at, accepted_at in accepted_rows:
            created = parse_iso_datetime(created_at)
            accepted = parse_iso_datetime(accepted_at)
            if created is not None and accepted is not None:
                durations.append((accepted - created).total_seconds())

        average = sum(durations) / len(durations) if durations else None

        return MatchStats(
            total_matches=sum(counts.values()),
            accepted_matches=counts.get(MatchStatus.ACCEPTED.value, 0),
            rejected_matches=counts.get(MatchStatus.REJECTED.value, 0),
            pending_matches=counts.get(MatchStatus.PENDING.value, 0),
            average_match_time=format_duration_hms(average),
        )


class LeaseRepository:
    """Per-request leases that keep concurrent runs from duplicating matches.

    acquire() may roll back the session on a lost insert race, so give it a
    session of its own rather than sharing one with other writes.
    """

    def __init__(self, session: Session):
        self.session = session

    def acquire(
        self,
        request_id: str,
        fingerprint: str,
        ttl_seconds: int,
        now: Optional[datetime] = None,
    ) -> bool:
        """Take the lease for request_id.

        Returns:
            True if the lease was taken (fresh or expired), False if another
            run holds a live one
        """
        now = now or utc_now()
        cutoff = format_timestamp(now - timedelta(seconds=ttl_seconds))

        try:
            expired = self.session.execute(
                delete(LeaseModel).where(
                    LeaseModel.request_id == request_id,
                    LeaseModel.acquired_at < cutoff,
                )
            )
            if expired.rowcount:
                logger.warning(
                    f"Taking over expired lease for request {request_id}",
                    extra={"event": "store.lease.expired", "request_id": request_id},
                )

            if self.session.get(LeaseModel, request_id) is not None:
                return False

            self.session.add(
                LeaseModel(
                    request_id=request_id,
                    fingerprint=fingerprint,
                    acquired_at=format_timestamp(now),
                )
            )
            self.session.flush()
            return True

        except IntegrityError:
            # Lost the insert race to another worker
            self.session.rollback()
            return False
        except SQLAlchemyError as e:
            logger.error(f"Error acquiring lease for {request_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to acquire lease: {e}") from e

    def release(self, request_id: str) -> bool:
        """Drop the lease. Returns False if there was none."""
        try:
            result = self.session.execute(
                delete(LeaseModel).where(LeaseModel.request_id == request_id)
            )
            self.session.flush()
            return result.rowcount > 0
        except SQLAlchemyError as e:
            logger.error(f"Error releasing lease for {request_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to release lease: {e}") from e

    def get_fingerprint(self, request_id: str) -> Optional[str]:
        try:
            lease = self.session.get(LeaseModel, request_id)
            return lease.fingerprint if lease is not None else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read lease: {e}") from e
