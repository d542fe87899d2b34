"""Orchestration of SOS requests into persisted, announced matches."""

from .models import OrchestrationResult, RunFailure
from .runner import MatchOrchestrator, new_match_id

__all__ = ["MatchOrchestrator", "OrchestrationResult", "RunFailure", "new_match_id"]
