"""Skill and resource matchers.

Each matcher fans one registry query out per requested tag, filters and ranks
the union of what comes back, and tolerates per-tag upstream failures: a tag
whose query fails contributes zero candidates and is reported in the outcome.
"""

from typing import List, Optional

from sos_matching.clients.registry import RegistryClient
from sos_matching.config.models import MatchingConfig
from sos_matching.domain.models import Location
from sos_matching.logging import get_logger

from .distance import haversine_km
from .fanout import gather
from .filters import is_eligible_resource, is_eligible_skill, skill_search_set
from .models import DistancedCandidate, MatchingOutcome, QueryOutcome, ScoredCandidate
from .scoring import calculate_match_score, effective_trust_score

logger = get_logger(__name__, component="matcher")


def _search_radius(config: MatchingConfig, radius_km: Optional[float]) -> float:
    if radius_km is None:
        return config.max_radius_km
    return min(radius_km, config.max_radius_km)


def _log_failures(failures: List[QueryOutcome], kind: str) -> None:
    for failure in failures:
        logger.warning(
            f"Registry query for {kind} '{failure.key}' failed; continuing without it",
            extra={
                "event": f"matcher.{kind}.query_failed",
                "tag": failure.key,
                "error_type": failure.error_type,
                "error": str(failure.error),
            },
        )


class SkillMatcher:
    """Finds, scores and ranks volunteer skill candidates."""

    def __init__(self, registry: RegistryClient, config: MatchingConfig):
        self.registry = registry
        self.config = config

    def find_skill_matches(
        self,
        disaster_type: Optional[str],
        required_skills: List[str],
        location: Location,
        urgency: str,
        radius_km: Optional[float] = None,
    ) -> MatchingOutcome[ScoredCandidate]:
        """Return up to max_matches_per_request candidates, best score first.

        Args:
            disaster_type: Resolved disaster type; picks the default skill set
            required_skills: Explicit skill tags; overrides the default set when non-empty
            location: SOS location
            urgency: Request urgency
            radius_km: Optional narrower search radius

        Returns:
            MatchingOutcome with ranked ScoredCandidates and any failed tags
        """
        tags = skill_search_set(disaster_type, required_skills)
        radius = _search_radius(self.config, radius_km)

        outcomes = gather(
            [
                (tag, lambda: self.registry.fetch_skills(disaster_type, location, radius))
                for tag in tags
            ],
            max_workers=self.config.max_concurrent_queries,
        )

        scored: List[ScoredCandidate] = []
        failures = [o for o in outcomes if not o.ok]
        for outcome in outcomes:
            if not outcome.ok:
                continue
            for candidate in outcome.value:
                if not is_eligible_skill(candidate, outcome.key):
                    continue
                distance = haversine_km(
                    location.latitude,
                    location.longitude,
                    candidate.location.latitude,
                    candidate.location.longitude,
                )
                score = calculate_match_score(
                    candidate, distance, urgency, self.config.max_radius_km
                )
                if score < self.config.score_threshold:
                    continue
                scored.append(
                    ScoredCandidate(
                        candidate=candidate,
                        distance_km=distance,
                        match_score=score,
                        trust_score=effective_trust_score(candidate),
                    )
                )

        _log_failures(failures, "skill")

        # sort() is stable: equal scores keep tag order, then registry order
        scored.sort(key=lambda c: c.match_score, reverse=True)
        ranked = scored[: self.config.max_matches_per_request]

        logger.info(
            f"Skill matching found {len(ranked)} candidate(s)",
            extra={
                "event": "matcher.skill.completed",
                "tags_searched": len(tags),
                "tags_failed": len(failures),
                "eligible": len(scored),
                "returned": len(ranked),
            },
        )
        return MatchingOutcome(candidates=ranked, failures=failures)


class ResourceMatcher:
    """Finds physical resources and ranks them nearest first."""

    def __init__(self, registry: RegistryClient, config: MatchingConfig):
        self.registry = registry
        self.config = config

    def find_resource_matches(
        self,
        disaster_type: Optional[str],
        required_resources: List[str],
        location: Location,
        urgency: str,
        radius_km: Optional[float] = None,
    ) -> MatchingOutcome[DistancedCandidate]:
        """Return up to max_matches_per_request resources, nearest first.

        Resources are not scored; ``urgency`` is accepted for symmetry with
        the skill matcher and does not affect ranking.
        """
        tags = list(dict.fromkeys(required_resources or []))
        radius = _search_radius(self.config, radius_km)

        outcomes = gather(
            [
                (tag, lambda: self.registry.fetch_resources(disaster_type, location, radius))
                for tag in tags
            ],
            max_workers=self.config.max_concurrent_queries,
        )

        found: List[DistancedCandidate] = []
        failures = [o for o in outcomes if not o.ok]
        for outcome in outcomes:
            if not outcome.ok:
                continue
            for candidate in outcome.value:
                if not is_eligible_resource(candidate, outcome.key):
                    continue
                distance = haversine_km(
                    location.latitude,
                    location.longitude,
                    candidate.location.latitude,
                    candidate.location.longitude,
                )
                found.append(DistancedCandidate(candidate=candidate, distance_km=distance))

        _log_failures(failures, "resource")

        found.sort(key=lambda c: c.distance_km)
        ranked = found[: self.config.max_matches_per_request]

        logger.info(
            f"Resource matching found {len(ranked)} candidate(s)",
            extra={
                "event": "matcher.resource.completed",
                "tags_searched": len(tags),
                "tags_failed": len(failures),
                "eligible": len(found),
                "returned": len(ranked),
            },
        )
        return MatchingOutcome(candidates=ranked, failures=failures)
