"""Persistence layer exceptions.

All persistence exceptions inherit from PersistenceError so the orchestrator
can treat any storage failure as fatal with a single except clause.
"""

from typing import Optional


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Raised when the database cannot be initialised or is not initialised yet."""

    pass


class RecordNotFoundError(PersistenceError):
    """Raised when an operation requires a record that does not exist.

    Optional lookups return None instead.
    """

    pass


class MatchNotFoundError(RecordNotFoundError):
    """Raised when a pending match owned by the caller cannot be found.

    Callers see one outcome for every cause. ``reason`` records which one it
    was (not_found, not_owner, already_accepted, already_rejected) for logs.
    """

    def __init__(self, match_id: str, reason: Optional[str] = None):
        self.match_id = match_id
        self.reason = reason
        super().__init__(f"Match {match_id} not found or unauthorized")


class DataIntegrityError(PersistenceError):
    """Raised on a constraint violation (duplicate match id, NOT NULL, ...)."""

    pass
