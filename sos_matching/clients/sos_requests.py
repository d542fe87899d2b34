"""Client for the SOS-request service."""

from .base import BaseClient


class SOSRequestClient(BaseClient):
    """Reports matching progress back to the service that owns SOS requests.

    API Details:
        Endpoint: {base_url}/api/sos/requests/{request_id}/status
        Method: PUT
        Body: {"status": "<status>"}
    """

    SERVICE_NAME = "sos-service"

    def update_status(self, request_id: str, status: str) -> None:
        """Set the status of an SOS request.

        Raises:
            UpstreamError: When the call fails
        """
        self._make_request(
            f"/api/sos/requests/{request_id}/status",
            method="PUT",
            json_data={"status": status},
        )
