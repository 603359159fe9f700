"""queen-bee: phase-based prompt orchestration."""

from .orchestrator import QueenBeeOrchestrator, get_instance, reset_instance

__all__ = ["QueenBeeOrchestrator", "get_instance", "reset_instance"]
