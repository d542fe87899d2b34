"""Domain models for the SOS matching service."""

from .models import (
    AVAILABLE,
    CertificationLevel,
    DisasterType,
    Location,
    Match,
    MatchRequest,
    MatchStats,
    MatchStatus,
    ResourceCandidate,
    SkillCandidate,
    Urgency,
)

__all__ = [
    "AVAILABLE",
    "CertificationLevel",
    "DisasterType",
    "Location",
    "Match",
    "MatchRequest",
    "MatchStats",
    "MatchStatus",
    "ResourceCandidate",
    "SkillCandidate",
    "Urgency",
]
