"""Matching API endpoints.

Handlers are plain ``def`` functions: the orchestrator and the store block on
network and database I/O, so FastAPI runs them in its worker thread pool.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from sos_matching.domain.models import MatchRequest
from sos_matching.lifecycle.service import MatchLifecycleService
from sos_matching.pipeline.runner import MatchOrchestrator

from .errors import MISSING_PARAMETER, APIError
from .schemas import (
    AcceptMatchBody,
    MatchListResponse,
    MatchRunResponse,
    MatchView,
    RejectMatchBody,
    StatsResponse,
)

router = APIRouter(prefix="/api/matching", tags=["matching"])


def get_orchestrator(request: Request) -> MatchOrchestrator:
    return request.app.state.orchestrator


def get_lifecycle(request: Request) -> MatchLifecycleService:
    return request.app.state.lifecycle


@router.post("/match", response_model=MatchRunResponse)
def manual_match(
    body: MatchRequest,
    orchestrator: MatchOrchestrator = Depends(get_orchestrator),
):
    """Run matching for an SOS request now.

    Skill matches are returned under ``matches`` (best score first) and
    resource matches under ``resourceMatches`` (nearest first).
    """
    result = orchestrator.process_sos_request(body)
    return result.to_response()


@router.post("/matches/{match_id}/accept", response_model=MatchView)
def accept_match(
    match_id: str,
    body: AcceptMatchBody,
    lifecycle: MatchLifecycleService = Depends(get_lifecycle),
):
    """Accept a pending match offered to the given volunteer."""
    return lifecycle.accept(match_id, body.volunteer_id).to_response()


@router.post("/matches/{match_id}/reject", response_model=MatchView)
def reject_match(
    match_id: str,
    body: RejectMatchBody,
    lifecycle: MatchLifecycleService = Depends(get_lifecycle),
):
    """Reject a pending match offered to the given volunteer."""
    return lifecycle.reject(match_id, body.volunteer_id, body.reason).to_response()


@router.get("/matches", response_model=MatchListResponse)
def list_matches(
    request_id: Optional[str] = Query(None, alias="requestId"),
    lifecycle: MatchLifecycleService = Depends(get_lifecycle),
):
    """All matches for a request, best score first."""
    if not request_id:
        raise APIError(status.HTTP_400_BAD_REQUEST, MISSING_PARAMETER, "requestId is required")
    return {"matches": [m.to_response() for m in lifecycle.list_matches(request_id)]}


@router.get("/stats", response_model=StatsResponse)
def match_stats(lifecycle: MatchLifecycleService = Depends(get_lifecycle)):
    """Counts per status and the mean time to acceptance."""
    return lifecycle.get_stats().model_dump(by_alias=True)
