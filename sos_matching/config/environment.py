"""Environment variable loading and validation.

Environment variables take precedence over config.yaml for the values that
deployments commonly tune per environment: collaborator URLs and the three
matching tunables.
"""

import os
from typing import Any, Dict, Optional

from .exceptions import ConfigurationError

DEFAULT_DATABASE_URL = "sqlite:///./data/sos_matching.db"

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# env var -> (config section, field)
_URL_VARIABLES = {
    "DISASTER_SERVICE_URL": ("services", "disaster_service_url"),
    "SOS_SERVICE_URL": ("services", "sos_service_url"),
    "SKILL_SERVICE_URL": ("services", "skill_service_url"),
}

# env var -> (config section, field, type)
_NUMERIC_VARIABLES = {
    "MATCH_SCORE_THRESHOLD": ("matching", "score_threshold", float),
    "MAX_MATCH_RADIUS": ("matching", "max_radius_km", float),
    "MAX_MATCHES_PER_REQUEST": ("matching", "max_matches_per_request", int),
}


class EnvironmentConfig:
    """Environment variable configuration holder."""

    def __init__(
        self,
        database_url: Optional[str] = None,
        log_level: Optional[str] = None,
        environment: Optional[str] = None,
        overrides: Optional[Dict[str, Dict[str, Any]]] = None,
    ):
        self.database_url = database_url or DEFAULT_DATABASE_URL
        self.log_level = log_level
        self.environment = environment or "local"
        self.overrides = overrides or {}


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    Optional environment variables:
    - DATABASE_URL: SQLAlchemy URL (default: sqlite:///./data/sos_matching.db)
    - LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - ENVIRONMENT: Label stamped on log records (default: local)
    - DISASTER_SERVICE_URL, SOS_SERVICE_URL, SKILL_SERVICE_URL: collaborator base URLs
    - MATCH_SCORE_THRESHOLD: float, MAX_MATCH_RADIUS: float (km),
      MAX_MATCHES_PER_REQUEST: int

    Returns:
        EnvironmentConfig with the values found and a nested ``overrides`` dict
        to apply on top of AppConfig

    Raises:
        ConfigurationError: If any variable is malformed (all problems reported together)
    """
    errors = []
    overrides: Dict[str, Dict[str, Any]] = {}

    log_level = os.getenv("LOG_LEVEL")
    if log_level and log_level.upper() not in _VALID_LOG_LEVELS:
        errors.append(
            f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(_VALID_LOG_LEVELS)}"
        )

    for variable, (section, field) in _URL_VARIABLES.items():
        value = os.getenv(variable)
        if not value:
            continue
        if not value.startswith(("http://", "https://")):
            errors.append(f"Invalid {variable}: '{value}'. Must be an http(s) URL.")
            continue
        overrides.setdefault(section, {})[field] = value

    for variable, (section, field, cast) in _NUMERIC_VARIABLES.items():
        raw = os.getenv(variable)
        if not raw:
            continue
        try:
            value = cast(raw)
        except ValueError:
            errors.append(
                f"Invalid {variable}: '{raw}'. Must be a valid {cast.__name__}."
            )
            continue
        if value <= 0 and variable != "MATCH_SCORE_THRESHOLD":
            errors.append(f"Invalid {variable}: {value}. Must be positive.")
            continue
        overrides.setdefault(section, {})[field] = value

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and review the values",
                "Numeric tunables must be plain numbers (e.g. MAX_MATCH_RADIUS=50)",
            ],
        )

    return EnvironmentConfig(
        database_url=os.getenv("DATABASE_URL"),
        log_level=log_level.upper() if log_level else None,
        environment=os.getenv("ENVIRONMENT"),
        overrides=overrides,
    )
