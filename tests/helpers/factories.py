"""Builders for domain objects used across the test suite."""

from datetime import datetime, timezone
from typing import Any, Dict

from sos_matching.domain.models import (
    Location,
    Match,
    MatchRequest,
    ResourceCandidate,
    SkillCandidate,
)

ORIGIN = Location(latitude=23.8103, longitude=90.4125)
NOW = datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc)

# Roughly 1.11 km of latitude per 0.01 degree
KM_PER_DEGREE_LAT = 111.195


def offset(km_north: float, base: Location = ORIGIN) -> Location:
    """A location km_north kilometres due north of base."""
    return Location(latitude=base.latitude + km_north / KM_PER_DEGREE_LAT, longitude=base.longitude)


def skill(
    skill_id: str = "sk-1",
    user_id: str = "vol-1",
    skill_type: str = "medic",
    km: float = 1.0,
    availability: str = "available",
    verified: bool = True,
    trust_score=8.0,
    certification_level=None,
) -> SkillCandidate:
    return SkillCandidate(
        skill_id=skill_id,
        user_id=user_id,
        skill_type=skill_type,
        location=offset(km),
        availability=availability,
        verified=verified,
        trust_score=trust_score,
        certification_level=certification_level,
    )


def resource(
    resource_id: str = "res-1",
    user_id: str = "owner-1",
    resource_type: str = "boat",
    km: float = 1.0,
    availability: str = "available",
) -> ResourceCandidate:
    return ResourceCandidate(
        resource_id=resource_id,
        user_id=user_id,
        resource_type=resource_type,
        location=offset(km),
        availability=availability,
    )


def request_payload(**overrides: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "requestId": "sos-1",
        "disasterId": "dis-1",
        "location": {"latitude": ORIGIN.latitude, "longitude": ORIGIN.longitude},
        "urgency": "high",
    }
    payload.update(overrides)
    return payload


def match_request(**overrides: Any) -> MatchRequest:
    return MatchRequest.model_validate(request_payload(**overrides))


def skill_match(**overrides: Any) -> Match:
    fields: Dict[str, Any] = dict(
        match_id="match-1",
        request_id="sos-1",
        volunteer_id="vol-1",
        skill_id="sk-1",
        skill_type="medic",
        match_score=7.0,
        distance=2.0,
        trust_score=8.0,
        created_at=NOW,
        updated_at=NOW,
    )
    fields.update(overrides)
    return Match(**fields)


def resource_match(**overrides: Any) -> Match:
    fields: Dict[str, Any] = dict(
        match_id="match-r1",
        request_id="sos-1",
        volunteer_id="owner-1",
        resource_id="res-1",
        resource_type="boat",
        match_score=8.0,
        distance=1.5,
        created_at=NOW,
        updated_at=NOW,
    )
    fields.update(overrides)
    return Match(**fields)
