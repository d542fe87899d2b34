"""Orchestration of one SOS request through matching, storage and events."""

from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from sos_matching.clients.disaster_registry import DisasterRegistryClient
from sos_matching.clients.exceptions import UpstreamError
from sos_matching.clients.factory import CollaboratorClients
from sos_matching.clients.sos_requests import SOSRequestClient
from sos_matching.config.models import MatchingConfig
from sos_matching.domain.models import DisasterType, Match, MatchRequest, MatchStatus
from sos_matching.events.publisher import EventPublisher
from sos_matching.logging import get_logger
from sos_matching.logging.context import log_context
from sos_matching.matching.engine import ResourceMatcher, SkillMatcher
from sos_matching.matching.filters import DISASTER_SKILL_MAP
from sos_matching.matching.models import (
    DistancedCandidate,
    MatchingOutcome,
    ScoredCandidate,
)
from sos_matching.persistence.database import get_session
from sos_matching.persistence.exceptions import PersistenceError
from sos_matching.persistence.repositories import LeaseRepository, MatchRepository
from sos_matching.utils.hashing import compute_request_fingerprint
from sos_matching.utils.timestamps import utc_now

from .models import OrchestrationResult, RunFailure

logger = get_logger(__name__, component="orchestrator")

MATCHED_STATUS = "matched"


def new_match_id() -> str:
    return f"match-{uuid4()}"


class MatchOrchestrator:
    """
    Runs the matching pipeline for a single SOS request.

    Steps: resolve disaster type -> find skill and resource candidates ->
    persist pending matches -> mark the request "matched" -> publish one
    match.created event per match.

    Upstream failures degrade the result and are reported on it. Storage
    failures abort the run and propagate.
    """

    def __init__(
        self,
        config: MatchingConfig,
        disaster_registry: DisasterRegistryClient,
        sos_requests: SOSRequestClient,
        skill_matcher: SkillMatcher,
        resource_matcher: ResourceMatcher,
        publisher: EventPublisher,
        id_factory: Callable[[], str] = new_match_id,
    ):
        self.config = config
        self.disaster_registry = disaster_registry
        self.sos_requests = sos_requests
        self.skill_matcher = skill_matcher
        self.resource_matcher = resource_matcher
        self.publisher = publisher
        self.id_factory = id_factory

    @classmethod
    def from_clients(
        cls, config: MatchingConfig, clients: CollaboratorClients, publisher: EventPublisher
    ) -> "MatchOrchestrator":
        return cls(
            config=config,
            disaster_registry=clients.disaster_registry,
            sos_requests=clients.sos_requests,
            skill_matcher=SkillMatcher(clients.registry, config),
            resource_matcher=ResourceMatcher(clients.registry, config),
            publisher=publisher,
        )

    def match_request(self, payload: Dict[str, Any]) -> OrchestrationResult:
        """Validate a raw camelCase payload and run it.

        Raises:
            pydantic.ValidationError: If the payload is not a valid MatchRequest
            PersistenceError: If matches cannot be stored
        """
        return self.process_sos_request(MatchRequest.model_validate(payload))

    def process_sos_request(self, request: MatchRequest) -> OrchestrationResult:
        """
        Match one SOS request end to end.

        Returns:
            OrchestrationResult with the persisted matches, or skipped=True
            when another live run holds the request's lease

        Raises:
            PersistenceError: If matches cannot be stored; nothing is published
        """
        result = OrchestrationResult(
            request_id=request.request_id, run_id=uuid4().hex, started_at=utc_now()
        )

        with log_context(request_id=request.request_id, run_id=result.run_id):
            if self.config.dedupe_requests and not self._acquire_lease(request):
                logger.warning(
                    f"Matching skipped for request {request.request_id}: already in progress",
                    extra={"event": "orchestrator.run.skipped", "reason": "lease_held"},
                )
                result.skipped = True
                result.finished_at = utc_now()
                return result

            try:
                self._run(request, result)
            finally:
                if self.config.dedupe_requests:
                    self._release_lease(request.request_id)

        return result

    def _run(self, request: MatchRequest, result: OrchestrationResult) -> None:
        logger.info(
            f"Processing matching for request {request.request_id}",
            extra={
                "event": "orchestrator.run.started",
                "disaster_id": request.disaster_id,
                "urgency": request.urgency,
                "required_skills": len(request.required_skills),
                "required_resources": len(request.required_resources),
            },
        )

        self._resolve_disaster_type(request, result)

        skills = self.skill_matcher.find_skill_matches(
            result.disaster_type,
            request.required_skills,
            request.location,
            request.urgency,
            radius_km=request.radius,
        )
        self._record_query_failures(result, skills, "skill_query")

        resources = self.resource_matcher.find_resource_matches(
            result.disaster_type,
            request.required_resources,
            request.location,
            request.urgency,
            radius_km=request.radius,
        )
        self._record_query_failures(result, resources, "resource_query")

        self._persist(request, result, skills.candidates, resources.candidates)
        self._report_matched(request, result)
        self._publish_created(result)

        result.finished_at = utc_now()
        logger.info(
            f"Matching completed for request {request.request_id}",
            extra={
                "event": "orchestrator.run.completed",
                "matches_found": len(result.matches),
                "skill_matches": len(result.skill_matches),
                "resource_matches": len(result.resource_matches),
                "upstream_failures": len(result.failures),
                "publish_failures": len(result.publish_failures),
                "duration_ms": int(result.duration_seconds * 1000),
            },
        )

    def _resolve_disaster_type(self, request: MatchRequest, result: OrchestrationResult) -> None:
        if request.disaster_type:
            result.disaster_type = request.disaster_type
            result.disaster_type_source = "request"
            return

        try:
            result.disaster_type = self.disaster_registry.get_disaster_type(request.disaster_id)
            result.disaster_type_source = "registry"
            if result.disaster_type not in DISASTER_SKILL_MAP:
                logger.info(
                    f"Disaster type {result.disaster_type!r} has no default skills",
                    extra={
                        "event": "orchestrator.disaster.unrecognised",
                        "disaster_id": request.disaster_id,
                        "disaster_type": result.disaster_type,
                    },
                )
        except UpstreamError as e:
            result.disaster_type = DisasterType(self.config.default_disaster_type).value
            result.disaster_type_source = "default"
            result.failures.append(
                RunFailure(
                    stage="disaster_lookup",
                    key=request.disaster_id,
                    error_type=type(e).__name__,
                    message=str(e),
                )
            )
            logger.warning(
                f"Could not fetch disaster details; using '{result.disaster_type}'",
                extra={
                    "event": "orchestrator.disaster.fallback",
                    "disaster_id": request.disaster_id,
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
            )

    @staticmethod
    def _record_query_failures(
        result: OrchestrationResult, outcome: MatchingOutcome, stage: str
    ) -> None:
        for failure in outcome.failures:
            result.failures.append(
                RunFailure(
                    stage=stage,
                    key=failure.key,
                    error_type=failure.error_type,
                    message=str(failure.error),
                )
            )

    def _persist(
        self,
        request: MatchRequest,
        result: OrchestrationResult,
        skills: List[ScoredCandidate],
        resources: List[DistancedCandidate],
    ) -> None:
        now = utc_now()
        skill_matches = [
            Match(
                match_id=self.id_factory(),
                request_id=request.request_id,
                volunteer_id=c.volunteer_id,
                skill_id=c.candidate.skill_id,
                skill_type=c.skill_type,
                match_score=c.match_score,
                distance=c.distance_km,
                trust_score=c.trust_score,
                status=MatchStatus.PENDING,
                created_at=now,
                updated_at=now,
            )
            for c in skills
        ]
        resource_matches = [
            Match(
                match_id=self.id_factory(),
                request_id=request.request_id,
                volunteer_id=c.owner_id,
                resource_id=c.candidate.resource_id,
                resource_type=c.resource_type,
                match_score=self.config.resource_match_score,
                distance=c.distance_km,
                status=MatchStatus.PENDING,
                created_at=now,
                updated_at=now,
            )
            for c in resources
        ]

        try:
            with get_session() as session:
                repo = MatchRepository(session)
                result.skill_matches = repo.add_all(skill_matches)
                result.resource_matches = repo.add_all(resource_matches)
        except PersistenceError as e:
            logger.error(
                f"Failed to store matches for request {request.request_id}: {e}",
                exc_info=True,
                extra={"event": "orchestrator.persist.failed", "error_type": type(e).__name__},
            )
            raise

        logger.info(
            f"Stored {len(result.matches)} match(es)",
            extra={
                "event": "orchestrator.persist.completed",
                "skill_matches": len(result.skill_matches),
                "resource_matches": len(result.resource_matches),
            },
        )

    def _report_matched(self, request: MatchRequest, result: OrchestrationResult) -> None:
        try:
            self.sos_requests.update_status(request.request_id, MATCHED_STATUS)
            result.status_updated = True
        except UpstreamError as e:
            result.failures.append(
                RunFailure(
                    stage="status_update",
                    key=request.request_id,
                    error_type=type(e).__name__,
                    message=str(e),
                )
            )
            logger.warning(
                f"Could not update SOS request status: {e}",
                extra={"event": "orchestrator.status_update.failed", "error_type": type(e).__name__},
            )

    def _publish_created(self, result: OrchestrationResult) -> None:
        for match in result.matches:
            outcome = self.publisher.publish_match_created(match)
            if not outcome.is_success():
                result.publish_failures.append(outcome)

    def _acquire_lease(self, request: MatchRequest) -> bool:
        fingerprint = compute_request_fingerprint(request.model_dump(mode="json"))
        holder_fingerprint = None
        with get_session() as session:
            leases = LeaseRepository(session)
            acquired = leases.acquire(
                request.request_id, fingerprint, self.config.lease_ttl_seconds
            )
            if not acquired:
                holder_fingerprint = leases.get_fingerprint(request.request_id)

        if holder_fingerprint is not None and holder_fingerprint != fingerprint:
            logger.warning(
                f"Request {request.request_id} is already being matched with different content",
                extra={
                    "event": "orchestrator.lease.content_mismatch",
                    "fingerprint": fingerprint,
                    "holder_fingerprint": holder_fingerprint,
                },
            )
        logger.debug(
            f"Lease {'acquired' if acquired else 'held elsewhere'} for {request.request_id}",
            extra={"event": "orchestrator.lease.acquire", "acquired": acquired},
        )
        return acquired

    def _release_lease(self, request_id: str) -> None:
        try:
            with get_session() as session:
                LeaseRepository(session).release(request_id)
        except PersistenceError as e:
            # The lease lapses after lease_ttl_seconds
            logger.error(
                f"Failed to release lease for {request_id}: {e}",
                extra={"event": "orchestrator.lease.release_failed", "error_type": type(e).__name__},
            )
