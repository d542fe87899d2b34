"""Exceptions raised by collaborator service clients.

Every collaborator failure is an UpstreamError. Matchers and the orchestrator
catch UpstreamError and degrade to partial results; nothing in this hierarchy
is meant to reach an HTTP caller.
"""

from typing import Optional


class UpstreamError(Exception):
    """Base exception for a failed collaborator call."""

    pass


class UpstreamHTTPError(UpstreamError):
    """Collaborator answered with a 4xx/5xx status, or the connection failed (status 0)."""

    def __init__(self, message: str, status_code: int, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class UpstreamTimeoutError(UpstreamError):
    """Collaborator did not answer within the configured timeout."""

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url


class UpstreamResponseError(UpstreamError):
    """Collaborator answered but the body could not be parsed or lacked required fields."""

    pass


class ClientConfigurationError(ValueError):
    """A client was built with an invalid base URL, timeout or user agent."""

    pass
