"""Match lifecycle operations."""

from .service import MatchLifecycleService

__all__ = ["MatchLifecycleService"]
