"""Configuration management for the SOS matching service."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, validate_config_file
from .models import (
    AppConfig,
    HTTPConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    MatchingConfig,
    QueueConfig,
    ServiceEndpoints,
)

__all__ = [
    # Loader functions
    "load_config",
    "validate_config_file",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "MatchingConfig",
    "ServiceEndpoints",
    "QueueConfig",
    "HTTPConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
]
