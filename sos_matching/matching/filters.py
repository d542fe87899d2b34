"""Candidate eligibility predicates and the disaster -> skill table."""

from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple

from sos_matching.domain.models import AVAILABLE, ResourceCandidate, SkillCandidate

# Skills searched when a request does not name any, in search order.
DISASTER_SKILL_MAP: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "flood": ("boat_operator", "swimmer", "medic", "rescue_diver"),
        "earthquake": ("rescuer", "structural_engineer", "medic", "heavy_lifting"),
        "cyclone": ("shelter_manager", "logistics", "medic", "evacuation_specialist"),
        "fire": ("firefighter", "electrician", "medic", "smoke_diver"),
        "tsunami": ("rescue_diver", "medic", "boat_operator", "swimmer"),
        "landslide": ("rescuer", "medic", "heavy_lifting", "structural_engineer"),
    }
)


def skills_for_disaster(disaster_type: Optional[str]) -> Tuple[str, ...]:
    """Default skill tags for a disaster type; empty for unknown types."""
    if disaster_type is None:
        return ()
    key = getattr(disaster_type, "value", disaster_type)
    return DISASTER_SKILL_MAP.get(key, ())


def skill_search_set(disaster_type: Optional[str], required_skills: Iterable[str]) -> List[str]:
    """Skill tags to query: the explicit list if non-empty, else the disaster defaults.

    Repeated tags are queried once, first occurrence wins.
    """
    explicit = list(required_skills or [])
    tags = explicit if explicit else list(skills_for_disaster(disaster_type))
    return list(dict.fromkeys(tags))


def is_eligible_skill(candidate: SkillCandidate, skill_type: str) -> bool:
    """Matching tag, currently available, and verified."""
    return (
        candidate.skill_type == skill_type
        and candidate.availability == AVAILABLE
        and candidate.verified is True
    )


def is_eligible_resource(candidate: ResourceCandidate, resource_type: str) -> bool:
    """Matching tag and currently available. Resources are not verified."""
    return candidate.resource_type == resource_type and candidate.availability == AVAILABLE
