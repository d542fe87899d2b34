"""Persistence layer for matches and request leases.

Public API:
    # Database initialization and session management
    - init_database(database_url: str) -> None
    - get_session() -> ContextManager[Session]
    - close_database() -> None

    # Repositories
    - MatchRepository: inserts, listings, accept/reject transitions, stats
    - LeaseRepository: per-request run leases

Example usage:
    >>> from sos_matching.persistence import init_database, get_session, MatchRepository
    >>> init_database("sqlite:///./data/sos_matching.db")
    >>> with get_session() as session:
    ...     matches = MatchRepository(session).list_by_request("sos-1")
"""

from .database import close_database, get_engine, get_session, init_database, is_initialized
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    MatchNotFoundError,
    PersistenceError,
    RecordNotFoundError,
)
from .repositories import LeaseRepository, MatchRepository

__all__ = [
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    "is_initialized",
    "LeaseRepository",
    "MatchRepository",
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
    "MatchNotFoundError",
    "DataIntegrityError",
]
