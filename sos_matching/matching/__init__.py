"""Candidate discovery, filtering, scoring and ranking."""

from .distance import EARTH_RADIUS_KM, haversine_km
from .engine import ResourceMatcher, SkillMatcher
from .fanout import gather
from .filters import (
    DISASTER_SKILL_MAP,
    is_eligible_resource,
    is_eligible_skill,
    skill_search_set,
    skills_for_disaster,
)
from .models import DistancedCandidate, MatchingOutcome, QueryOutcome, ScoredCandidate
from .scoring import DEFAULT_TRUST_SCORE, calculate_match_score, effective_trust_score

__all__ = [
    "EARTH_RADIUS_KM",
    "haversine_km",
    "ResourceMatcher",
    "SkillMatcher",
    "gather",
    "DISASTER_SKILL_MAP",
    "is_eligible_resource",
    "is_eligible_skill",
    "skill_search_set",
    "skills_for_disaster",
    "DistancedCandidate",
    "MatchingOutcome",
    "QueryOutcome",
    "ScoredCandidate",
    "DEFAULT_TRUST_SCORE",
    "calculate_match_score",
    "effective_trust_score",
]
