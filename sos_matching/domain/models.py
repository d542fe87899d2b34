"""Core domain models for SOS matching.

This module defines the data structures used throughout the service:
- MatchRequest: transient request to match an SOS against volunteers/resources
- SkillCandidate / ResourceCandidate: registry inventory, read-only here
- Match: the durable pairing owned by the match store
- MatchStats: aggregate lifecycle counters

Wire format is camelCase JSON; Python attributes are snake_case. Every model
accepts both spellings on input and serialises with aliases when asked
(``model_dump(by_alias=True)``).
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from sos_matching.utils.timestamps import ensure_utc


class DisasterType(str, Enum):
    """Disaster categories known to the disaster registry."""

    FLOOD = "flood"
    EARTHQUAKE = "earthquake"
    CYCLONE = "cyclone"
    FIRE = "fire"
    TSUNAMI = "tsunami"
    LANDSLIDE = "landslide"


class Urgency(str, Enum):
    """SOS priority tier."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CertificationLevel(str, Enum):
    """Volunteer certification for a skill."""

    NONE = "none"
    INTERMEDIATE = "intermediate"
    EXPERT = "expert"


class MatchStatus(str, Enum):
    """Match lifecycle state. ``pending`` is the only valid initial state."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


AVAILABLE = "available"


class CamelModel(BaseModel):
    """Base for models exchanged as camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Location(CamelModel):
    """A (latitude, longitude) pair in decimal degrees."""

    latitude: float
    longitude: float

    def as_query_param(self) -> str:
        """Render as ``lat,lon`` for registry queries."""
        return f"{self.latitude},{self.longitude}"


class MatchRequest(CamelModel):
    """Request to match an SOS against registered skills and resources.

    Created at trigger time (HTTP call or queue message), consumed once by the
    orchestrator and never stored.
    """

    request_id: str = Field(..., min_length=1, description="Originating SOS request id")
    disaster_id: str = Field(..., min_length=1, description="Disaster registry id")
    disaster_type: Optional[DisasterType] = Field(
        None, description="Resolved through the disaster registry when absent"
    )
    required_skills: List[str] = Field(default_factory=list)
    required_resources: List[str] = Field(default_factory=list)
    location: Location
    urgency: Urgency
    radius: Optional[float] = Field(None, gt=0, description="Search radius override in km")

    @field_validator("required_skills", "required_resources", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        """Queue producers send null for 'no explicit list'."""
        return [] if v is None else v

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        json_schema_extra={
            "example": {
                "requestId": "sos-2041",
                "disasterId": "dis-17",
                "requiredSkills": ["medic"],
                "requiredResources": ["boat"],
                "location": {"latitude": 23.81, "longitude": 90.41},
                "urgency": "critical",
            }
        },
    )


class SkillCandidate(CamelModel):
    """A volunteer skill record as returned by the skill registry."""

    skill_id: str
    user_id: str
    skill_type: str
    location: Location
    availability: str = ""
    verified: bool = False
    trust_score: Optional[float] = Field(None, ge=0, le=10)
    certification_level: Optional[str] = None


class ResourceCandidate(CamelModel):
    """A physical resource as returned by the resource registry."""

    resource_id: str
    resource_type: str
    user_id: str = Field(..., description="Owner of the resource")
    location: Location
    availability: str = ""


class Match(CamelModel):
    """Durable pairing between an SOS request and a volunteer or resource.

    Exactly one of (skill_id, skill_type) or (resource_id, resource_type) is
    populated. Resource matches carry no trust score.
    """

    match_id: str
    request_id: str
    volunteer_id: str
    skill_id: Optional[str] = None
    skill_type: Optional[str] = None
    resource_id: Optional[str] = None
    resource_type: Optional[str] = None
    match_score: float = Field(..., ge=0, le=10)
    distance: float = Field(..., ge=0, description="Kilometres from the SOS location")
    trust_score: Optional[float] = None
    status: MatchStatus = MatchStatus.PENDING
    created_at: datetime
    updated_at: datetime
    accepted_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    @field_validator("created_at", "updated_at", "accepted_at", "rejected_at")
    @classmethod
    def as_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @model_validator(mode="after")
    def check_kind(self):
        """Enforce the skill-xor-resource and terminal-timestamp invariants."""
        is_skill = self.skill_id is not None or self.skill_type is not None
        is_resource = self.resource_id is not None or self.resource_type is not None
        if is_skill == is_resource:
            raise ValueError("A match references exactly one of a skill or a resource")
        if is_resource and self.trust_score is not None:
            raise ValueError("Resource matches do not carry a trust score")
        if self.accepted_at is not None and self.rejected_at is not None:
            raise ValueError("A match cannot be both accepted and rejected")
        return self

    @property
    def is_skill_match(self) -> bool:
        return self.skill_type is not None

    @property
    def is_resource_match(self) -> bool:
        return self.resource_type is not None

    def to_response(self) -> dict:
        """camelCase JSON-ready representation."""
        return self.model_dump(by_alias=True, mode="json")


class MatchStats(CamelModel):
    """Aggregate lifecycle counters across all matches."""

    total_matches: int = 0
    accepted_matches: int = 0
    rejected_matches: int = 0
    pending_matches: int = 0
    average_match_time: str = Field("00:00:00", description="Mean accept latency as HH:MM:SS")
