"""Suitability scoring for skill candidates.

The formula is fixed; changing the order of operations changes the float
results and therefore the ranking, so keep it exactly as written:

    base       = trust * 0.4 + max(0, 10 - (distance / max_radius) * 10) * 0.3
    score      = base * urgency_multiplier        (critical 1.2, high 1.1, else 1.0)
    score     += certification bonus               (expert 1.0, intermediate 0.5)
    result     = min(10, score)
"""

from typing import Optional, Protocol

from sos_matching.domain.models import CertificationLevel, Urgency

DEFAULT_TRUST_SCORE = 5.0
MAX_SCORE = 10.0

TRUST_WEIGHT = 0.4
DISTANCE_WEIGHT = 0.3

URGENCY_MULTIPLIERS = {
    Urgency.CRITICAL.value: 1.2,
    Urgency.HIGH.value: 1.1,
}

CERTIFICATION_BONUS = {
    CertificationLevel.EXPERT.value: 1.0,
    CertificationLevel.INTERMEDIATE.value: 0.5,
}


class Scorable(Protocol):
    trust_score: Optional[float]
    certification_level: Optional[str]


def effective_trust_score(candidate: Scorable) -> float:
    """Trust score used for scoring and storage; 5.0 when the registry omits it."""
    if candidate.trust_score is None:
        return DEFAULT_TRUST_SCORE
    return candidate.trust_score


def calculate_match_score(
    candidate: Scorable, distance_km: float, urgency: str, max_radius_km: float
) -> float:
    """Score a skill candidate on a 0-10 scale.

    Args:
        candidate: Object exposing trust_score and certification_level
        distance_km: Distance from the SOS location
        urgency: Request urgency ("critical", "high", "medium", "low")
        max_radius_km: Distance at which the distance component reaches zero

    Returns:
        Score in [0, 10] for non-negative trust and distance
    """
    score = 0.0
    score += effective_trust_score(candidate) * TRUST_WEIGHT

    distance_score = max(0.0, 10 - (distance_km / max_radius_km) * 10)
    score += distance_score * DISTANCE_WEIGHT

    score *= URGENCY_MULTIPLIERS.get(_value(urgency), 1.0)
    score += CERTIFICATION_BONUS.get(_value(candidate.certification_level), 0.0)

    return min(MAX_SCORE, score)


def _value(item) -> Optional[str]:
    # Accept both enum members and their raw string values
    return getattr(item, "value", item)
