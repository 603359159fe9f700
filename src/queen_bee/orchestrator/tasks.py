"""Agent task and result types shared by the phase runner and the orchestrator."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class TaskKind(str, Enum):
	"""The closed set of agents the orchestrator dispatches."""
	TRACK = "track"
	EVALUATE = "evaluate"
	CLASSIFY_CONTEXT = "classify_context"
	IMPROVE = "improve"


class ErrorKind(str, Enum):
	"""Why an agent produced no value."""
	TIMEOUT = "timeout"
	FAILURE = "failure"


@dataclass
class AgentTask(Generic[T]):
	"""
	A named unit of async work.

	`run` is a zero-argument factory; it is called once per attempt, so a
	retry gets a fresh coroutine.
	"""
	name: str
	run: Callable[[], Awaitable[T]]
	timeout_ms: int = 5000
	retry_on_failure: bool = False
	kind: Optional[TaskKind] = None


@dataclass
class AgentResult(Generic[T]):
	"""What one task contributed to its phase."""
	ok: bool
	value: Optional[T] = None
	error: Optional[ErrorKind] = None
	message: str = ""
	duration_ms: int = 0
	attempts: int = 1

	@classmethod
	def succeeded(cls, value: Any, duration_ms: int = 0, attempts: int = 1) -> "AgentResult":
		return cls(ok=True, value=value, duration_ms=duration_ms, attempts=attempts)

	@classmethod
	def failed(
		cls,
		error: ErrorKind,
		message: str = "",
		duration_ms: int = 0,
		attempts: int = 1,
	) -> "AgentResult":
		return cls(ok=False, error=error, message=message, duration_ms=duration_ms, attempts=attempts)

	@property
	def timed_out(self) -> bool:
		return self.error == ErrorKind.TIMEOUT

	def to_dict(self) -> dict[str, Any]:
		"""Summary without the value, for run metadata."""
		return {
			"ok": self.ok,
			"error": self.error.value if self.error else None,
			"message": self.message,
			"duration_ms": self.duration_ms,
			"attempts": self.attempts,
		}
