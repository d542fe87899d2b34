"""Request and response bodies for the matching API."""

from typing import List, Optional

from pydantic import Field

from sos_matching.domain.models import CamelModel


class AcceptMatchBody(CamelModel):
    volunteer_id: str = Field(..., min_length=1)


class RejectMatchBody(CamelModel):
    volunteer_id: str = Field(..., min_length=1)
    reason: Optional[str] = Field(None, max_length=1000)


class MatchView(CamelModel):
    """A match as returned by the API."""

    match_id: str
    request_id: str
    volunteer_id: str
    skill_id: Optional[str] = None
    skill_type: Optional[str] = None
    resource_id: Optional[str] = None
    resource_type: Optional[str] = None
    match_score: float
    distance: float
    trust_score: Optional[float] = None
    status: str
    created_at: str
    updated_at: str
    accepted_at: Optional[str] = None
    rejected_at: Optional[str] = None
    rejection_reason: Optional[str] = None


class MatchListResponse(CamelModel):
    matches: List[MatchView]


class MatchRunResponse(CamelModel):
    request_id: str
    matches: List[MatchView]
    resource_matches: List[MatchView]
    matched_at: str
    skipped: bool = False


class StatsResponse(CamelModel):
    total_matches: int
    accepted_matches: int
    rejected_matches: int
    pending_matches: int
    average_match_time: str


class HealthResponse(CamelModel):
    status: str
    service: str
    timestamp: str
