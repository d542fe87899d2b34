"""Client for the skill and resource registry."""

from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from sos_matching.domain.models import Location, ResourceCandidate, SkillCandidate
from sos_matching.logging import get_logger

from .base import BaseClient
from .exceptions import UpstreamResponseError

logger = get_logger(__name__, component="registry")

CandidateT = TypeVar("CandidateT", bound=BaseModel)


class RegistryClient(BaseClient):
    """Queries volunteer skills and physical resources near a location.

    API Details:
        Endpoints: {base_url}/api/skills and {base_url}/api/resources
        Method: GET
        Query: disasterType, location ("lat,lon"), radius (km)
        Response: JSON object with a 'skills' / 'resources' array

    Records that fail validation (missing ids, missing location, ...) are
    skipped with a warning; the rest of the page is still returned.
    """

    SERVICE_NAME = "skill-registry"

    def fetch_skills(
        self, disaster_type: Optional[str], location: Location, radius_km: float
    ) -> List[SkillCandidate]:
        """Fetch skill records near a location.

        Raises:
            UpstreamError: When the registry call fails or the body is malformed
        """
        records = self._fetch("/api/skills", "skills", disaster_type, location, radius_km)
        return self._parse(records, SkillCandidate, id_field="skillId")

    def fetch_resources(
        self, disaster_type: Optional[str], location: Location, radius_km: float
    ) -> List[ResourceCandidate]:
        """Fetch resource records near a location.

        Raises:
            UpstreamError: When the registry call fails or the body is malformed
        """
        records = self._fetch("/api/resources", "resources", disaster_type, location, radius_km)
        return self._parse(records, ResourceCandidate, id_field="resourceId")

    def _fetch(
        self,
        path: str,
        key: str,
        disaster_type: Optional[str],
        location: Location,
        radius_km: float,
    ) -> List[Dict[str, Any]]:
        params = {
            "location": location.as_query_param(),
            "radius": radius_km,
        }
        if disaster_type:
            params["disasterType"] = disaster_type

        data = self._make_request(path, params=params)
        if not isinstance(data, dict):
            raise UpstreamResponseError(
                f"Expected JSON object from {path}, got {type(data).__name__}"
            )

        records = data.get(key) or []
        if not isinstance(records, list):
            raise UpstreamResponseError(
                f"Expected '{key}' field to be an array, got {type(records).__name__}"
            )
        return records

    @staticmethod
    def _parse(
        records: List[Dict[str, Any]], model: Type[CandidateT], id_field: str
    ) -> List[CandidateT]:
        candidates = []
        for record in records:
            try:
                candidates.append(model.model_validate(record))
            except ValidationError as e:
                logger.warning(
                    f"Skipping malformed {model.__name__} record",
                    extra={
                        "event": "registry.record.skipped",
                        "record_id": record.get(id_field) if isinstance(record, dict) else None,
                        "error_count": e.error_count(),
                    },
                )
        return candidates
