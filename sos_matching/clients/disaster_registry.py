"""Client for the disaster registry service."""

from typing import Optional

from sos_matching.logging import get_logger

from .base import BaseClient
from .exceptions import UpstreamResponseError

logger = get_logger(__name__, component="disaster_registry")


class DisasterRegistryClient(BaseClient):
    """Looks up disaster metadata.

    API Details:
        Endpoint: {base_url}/api/disasters/{disaster_id}
        Method: GET
        Response: JSON object with a 'disasterType' field
    """

    SERVICE_NAME = "disaster-registry"

    def get_disaster_type(self, disaster_id: str) -> Optional[str]:
        """Return the disaster type exactly as the registry reports it.

        Types outside the known set are passed through; they simply have no
        default skills. None means the registry answered without a type.

        Raises:
            UpstreamError: When the registry is unreachable or the body is
                not a JSON object
        """
        data = self._make_request(f"/api/disasters/{disaster_id}")
        if not isinstance(data, dict):
            raise UpstreamResponseError(
                f"Expected JSON object from disaster registry, got {type(data).__name__}"
            )

        raw_type = data.get("disasterType")
        if raw_type is None or (isinstance(raw_type, str) and not raw_type.strip()):
            logger.warning(
                f"Disaster {disaster_id} has no disasterType",
                extra={"event": "disaster_registry.type.missing", "disaster_id": disaster_id},
            )
            return None
        return str(raw_type).strip()
