"""Construction of collaborator clients from configuration."""

from dataclasses import dataclass

from sos_matching.config.models import AppConfig

from .disaster_registry import DisasterRegistryClient
from .registry import RegistryClient
from .sos_requests import SOSRequestClient


@dataclass
class CollaboratorClients:
    """The three collaborator clients the orchestrator depends on."""

    disaster_registry: DisasterRegistryClient
    sos_requests: SOSRequestClient
    registry: RegistryClient

    def close(self) -> None:
        self.disaster_registry.close()
        self.sos_requests.close()
        self.registry.close()


def build_clients(app_config: AppConfig) -> CollaboratorClients:
    """Create one client per collaborator using the shared HTTP settings.

    Raises:
        ClientConfigurationError: If a service URL or HTTP setting is invalid
    """
    http = app_config.http
    services = app_config.services
    common = {"timeout": http.request_timeout, "user_agent": http.user_agent}

    return CollaboratorClients(
        disaster_registry=DisasterRegistryClient(services.disaster_service_url, **common),
        sos_requests=SOSRequestClient(services.sos_service_url, **common),
        registry=RegistryClient(services.skill_service_url, **common),
    )
