"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from sos_matching.domain.models import DisasterType


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class MatchingConfig(BaseModel):
    """Tunables for candidate scoring, ranking and fan-out."""

    score_threshold: float = Field(
        5.0, ge=0, le=10, description="Skill matches scoring below this are discarded"
    )
    max_radius_km: float = Field(
        50.0, gt=0, description="Registry search radius and distance-score normaliser"
    )
    max_matches_per_request: int = Field(
        10, ge=1, description="Cap on skill matches and on resource matches per request"
    )
    max_concurrent_queries: int = Field(
        4, ge=1, le=32, description="Registry queries in flight per matcher"
    )
    default_disaster_type: DisasterType = Field(
        DisasterType.FLOOD, description="Used when the disaster registry cannot be reached"
    )
    resource_match_score: float = Field(
        8.0, ge=0, le=10, description="Fixed score stored on resource matches"
    )
    dedupe_requests: bool = Field(
        True, description="Hold a per-request lease so concurrent runs do not duplicate matches"
    )
    lease_ttl_seconds: int = Field(
        300, ge=1, le=3600, description="Age after which an abandoned lease may be taken over"
    )

    model_config = {"use_enum_values": True}


class ServiceEndpoints(BaseModel):
    """Base URLs of the collaborator services."""

    disaster_service_url: str = Field("http://localhost:3002")
    sos_service_url: str = Field("http://localhost:3003")
    skill_service_url: str = Field("http://localhost:3004")

    @field_validator("disaster_service_url", "sos_service_url", "skill_service_url")
    @classmethod
    def normalize_url(cls, v: str) -> str:
        """Require an http(s) URL and drop any trailing slash."""
        stripped = v.strip().rstrip("/")
        if not stripped.startswith(("http://", "https://")):
            raise ValueError(f"Service URL must start with http:// or https://, got: {v!r}")
        return stripped


class QueueConfig(BaseModel):
    """Event bus queue names."""

    notifications: str = Field("notifications.send", min_length=1)
    sos_requests: str = Field("sos.requests", min_length=1)


class HTTPConfig(BaseModel):
    """Outbound HTTP settings for collaborator calls."""

    request_timeout: float = Field(
        5.0, ge=1, le=60, description="Per-call timeout for collaborator requests (seconds)"
    )
    user_agent: str = Field("SOSMatchingService/1.0", min_length=1)

    @field_validator("user_agent")
    @classmethod
    def strip_user_agent(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("user_agent cannot be empty")
        return stripped


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class AppConfig(BaseModel):
    """Root configuration object for the SOS matching service."""

    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    services: ServiceEndpoints = Field(default_factory=ServiceEndpoints)
    queues: QueueConfig = Field(default_factory=QueueConfig)
    http: HTTPConfig = Field(default_factory=HTTPConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def check_queues_distinct(self):
        """Outbound notifications and SOS events must not share a queue."""
        if self.queues.notifications == self.queues.sos_requests:
            raise ValueError(
                f"queues.notifications and queues.sos_requests must differ, "
                f"both are '{self.queues.notifications}'"
            )
        return self

    def with_overrides(self, overrides: Optional[dict]) -> "AppConfig":
        """Return a copy with nested section overrides applied and re-validated.

        Args:
            overrides: Mapping like {"matching": {"score_threshold": 6.0}}
        """
        if not overrides:
            return self
        merged = self.model_dump()
        for section, values in overrides.items():
            merged.setdefault(section, {}).update(values)
        return AppConfig.model_validate(merged)
