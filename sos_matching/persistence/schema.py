"""Database schema definition and ORM models.

Timestamps are stored as ISO 8601 strings; conversion to and from domain
models happens here so repositories only ever hand out domain objects.
"""

from sqlalchemy import Column, Float, Index, String, Text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from sos_matching.domain.models import Match, MatchStatus
from sos_matching.logging import get_logger
from sos_matching.utils.timestamps import format_timestamp, parse_iso_datetime

logger = get_logger(__name__, component="database")

Base = declarative_base()


class MatchModel(Base):
    """ORM model for the matches table."""

    __tablename__ = "matches"

    match_id = Column(String(64), primary_key=True, nullable=False)
    request_id = Column(String(255), nullable=False)
    volunteer_id = Column(String(255), nullable=False)

    # Exactly one of the skill / resource pairs is populated
    skill_id = Column(String(255), nullable=True)
    skill_type = Column(String(100), nullable=True)
    resource_id = Column(String(255), nullable=True)
    resource_type = Column(String(100), nullable=True)

    match_score = Column(Float, nullable=False)
    distance = Column(Float, nullable=False)
    trust_score = Column(Float, nullable=True)

    status = Column(String(20), nullable=False, default=MatchStatus.PENDING.value)
    rejection_reason = Column(Text, nullable=True)

    created_at = Column(String(50), nullable=False)
    updated_at = Column(String(50), nullable=False)
    accepted_at = Column(String(50), nullable=True)
    rejected_at = Column(String(50), nullable=True)

    __table_args__ = (
        Index("idx_matches_request_id", "request_id"),
        Index("idx_matches_volunteer_id", "volunteer_id"),
        Index("idx_matches_status", "status"),
        Index("idx_matches_created_at", "created_at"),
    )

    def to_domain(self) -> Match:
        return Match(
            match_id=self.match_id,
            request_id=self.request_id,
            volunteer_id=self.volunteer_id,
            skill_id=self.skill_id,
            skill_type=self.skill_type,
            resource_id=self.resource_id,
            resource_type=self.resource_type,
            match_score=self.match_score,
            distance=self.distance,
            trust_score=self.trust_score,
            status=MatchStatus(self.status),
            rejection_reason=self.rejection_reason,
            created_at=parse_iso_datetime(self.created_at),
            updated_at=parse_iso_datetime(self.updated_at),
            accepted_at=parse_iso_datetime(self.accepted_at),
            rejected_at=parse_iso_datetime(self.rejected_at),
        )

    @classmethod
    def from_domain(cls, match: Match) -> "MatchModel":
        return cls(
            match_id=match.match_id,
            request_id=match.request_id,
            volunteer_id=match.volunteer_id,
            skill_id=match.skill_id,
            skill_type=match.skill_type,
            resource_id=match.resource_id,
            resource_type=match.resource_type,
            match_score=match.match_score,
            distance=match.distance,
            trust_score=match.trust_score,
            status=MatchStatus(match.status).value,
            rejection_reason=match.rejection_reason,
            created_at=format_timestamp(match.created_at),
            updated_at=format_timestamp(match.updated_at),
            accepted_at=format_timestamp(match.accepted_at),
            rejected_at=format_timestamp(match.rejected_at),
        )


class LeaseModel(Base):
    """ORM model for the match_leases table.

    One row per SOS request currently being matched. A row older than the
    configured TTL belongs to a run that died and may be taken over.
    """

    __tablename__ = "match_leases"

    request_id = Column(String(255), primary_key=True, nullable=False)
    fingerprint = Column(String(64), nullable=False)
    acquired_at = Column(String(50), nullable=False)


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes that do not exist yet."""
    logger.info("Creating database schema", extra={"event": "database.schema.creating"})
    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info(
        "Database schema ready",
        extra={"event": "database.schema.ready", "tables": sorted(Base.metadata.tables)},
    )

