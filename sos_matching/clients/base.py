"""Shared HTTP plumbing for collaborator service clients.

Each collaborator (disaster registry, SOS-request service, skill/resource
registry) gets a thin client built on BaseClient, which owns the
requests.Session, the per-call timeout and translation of transport failures
into the UpstreamError hierarchy.
"""

import logging
from typing import Any, Dict, Optional

import requests

from sos_matching.logging import get_logger

from .exceptions import (
    ClientConfigurationError,
    UpstreamHTTPError,
    UpstreamResponseError,
    UpstreamTimeoutError,
)

logger = get_logger(__name__, component="client")


class BaseClient:
    """Base class for collaborator clients.

    Attributes:
        base_url: Collaborator base URL without trailing slash
        timeout: Per-call timeout in seconds
        user_agent: User-Agent header sent on every request
    """

    SERVICE_NAME = "collaborator"

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        user_agent: str = "SOSMatchingService/1.0",
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize client.

        Args:
            base_url: Collaborator base URL (http or https)
            timeout: Per-call timeout in seconds (1-60)
            user_agent: User-Agent header value
            session: Optional pre-built session (tests inject a mock here)

        Raises:
            ClientConfigurationError: On an invalid URL, timeout or user agent
        """
        if not base_url or not base_url.startswith(("http://", "https://")):
            raise ClientConfigurationError(f"base_url must be an http(s) URL, got: {base_url!r}")
        if not 1 <= timeout <= 60:
            raise ClientConfigurationError(f"Timeout must be between 1 and 60 seconds, got: {timeout}")
        if not user_agent or not user_agent.strip():
            raise ClientConfigurationError("user_agent cannot be empty")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent.strip()

        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self.user_agent, "Accept": "application/json"})

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _make_request(
        self,
        path: str,
        method: str = "GET",
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Issue one HTTP call and return the decoded JSON body.

        An empty body decodes to an empty dict.

        Raises:
            UpstreamHTTPError: On 4xx/5xx or a connection-level failure (status 0)
            UpstreamTimeoutError: When the call exceeds the timeout
            UpstreamResponseError: When the body is not valid JSON
        """
        url = self._url(path)
        extra = {"collaborator": self.SERVICE_NAME, "method": method, "url": url}

        logger.debug(
            f"HTTP {method} {url}",
            extra={**extra, "event": "client.request.sent", "timeout": self.timeout},
        )

        try:
            response = self._session.request(
                method=method,
                url=url,
                params=params,
                json=json_data,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.warning(
                f"{self.SERVICE_NAME} call timed out after {self.timeout}s",
                extra={**extra, "event": "client.request.timeout"},
            )
            raise UpstreamTimeoutError(
                f"Request to {url} timed out after {self.timeout} seconds", url=url
            ) from e
        except requests.exceptions.RequestException as e:
            logger.warning(
                f"{self.SERVICE_NAME} call failed: {e}",
                extra={**extra, "event": "client.request.failed", "error_type": type(e).__name__},
            )
            raise UpstreamHTTPError(f"Request to {url} failed: {e}", status_code=0, url=url) from e

        if response.status_code >= 400:
            level = logging.WARNING if response.status_code >= 500 else logging.ERROR
            logger.log(
                level,
                f"HTTP {response.status_code} from {self.SERVICE_NAME}",
                extra={**extra, "event": "client.request.error", "status_code": response.status_code},
            )
            raise UpstreamHTTPError(
                f"HTTP {response.status_code}: {response.reason}",
                status_code=response.status_code,
                url=url,
            )

        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            logger.error(
                f"Invalid JSON from {self.SERVICE_NAME}",
                extra={**extra, "event": "client.response.invalid"},
            )
            raise UpstreamResponseError(f"Failed to parse JSON response from {url}: {e}") from e

    def close(self) -> None:
        """Release pooled connections."""
        self._session.close()
