"""HTTP clients for the collaborator services.

- DisasterRegistryClient: disaster type lookup
- SOSRequestClient: SOS request status updates
- RegistryClient: skill and resource inventory queries

Build all three from configuration with build_clients(app_config).
"""

from .base import BaseClient
from .disaster_registry import DisasterRegistryClient
from .exceptions import (
    ClientConfigurationError,
    UpstreamError,
    UpstreamHTTPError,
    UpstreamResponseError,
    UpstreamTimeoutError,
)
from .factory import CollaboratorClients, build_clients
from .registry import RegistryClient
from .sos_requests import SOSRequestClient

__all__ = [
    "BaseClient",
    "build_clients",
    "CollaboratorClients",
    "DisasterRegistryClient",
    "RegistryClient",
    "SOSRequestClient",
    # Exceptions
    "UpstreamError",
    "UpstreamHTTPError",
    "UpstreamTimeoutError",
    "UpstreamResponseError",
    "ClientConfigurationError",
]
