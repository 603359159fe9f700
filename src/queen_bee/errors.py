"""
Error taxonomy for the orchestrator.

Only ValidationFailure (from orchestrate) and ConfigurationError (from
construction or reset) ever reach a caller. AgentTimeout and AgentFailure
are raised inside a phase and folded into AgentResult values there.
"""

from typing import Any, Optional


class QueenBeeError(Exception):
	"""Base class for all orchestrator errors."""

	def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
		super().__init__(message)
		self.message = message
		self.details = details or {}


class ConfigurationError(QueenBeeError):
	"""Malformed orchestrator configuration."""


class ProcessingError(QueenBeeError):
	"""A run could not be started."""


class ValidationFailure(ProcessingError):
	"""The prompt failed basic shape checks."""

	def __init__(self, message: str, errors: Optional[list[str]] = None):
		super().__init__(message, {"errors": list(errors or [])})
		self.errors = list(errors or [])


class AgentTimeout(QueenBeeError):
	"""An agent task exceeded its deadline."""

	def __init__(self, task_name: str, timeout_ms: int):
		super().__init__(
			f"Agent '{task_name}' timed out after {timeout_ms}ms",
			{"task": task_name, "timeout_ms": timeout_ms},
		)
		self.task_name = task_name
		self.timeout_ms = timeout_ms


class AgentFailure(QueenBeeError):
	"""A collaborator raised or returned something unusable."""

	def __init__(self, task_name: str, cause: BaseException | str):
		super().__init__(
			f"Agent '{task_name}' failed: {cause}",
			{"task": task_name},
		)
		self.task_name = task_name
		self.cause = cause
