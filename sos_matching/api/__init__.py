"""HTTP API for the matching service."""

from .app import create_app, create_app_from_config
from .errors import APIError, error_body, format_validation_errors

__all__ = ["create_app", "create_app_from_config", "APIError", "error_body", "format_validation_errors"]
