"""
Phase Runner - Fan-out/fan-in execution of agent tasks.

Runs a set of AgentTasks concurrently under a concurrency bound. Each
attempt races its own deadline; a failed or timed-out task may be retried
once. Individual failures never abort the phase and never escape run():
the caller always gets one AgentResult per task, in task-list order.
"""

import asyncio
import logging
import time
from collections import Counter
from enum import Enum
from typing import Any, Mapping, Sequence

from ..errors import AgentFailure, AgentTimeout
from .tasks import AgentResult, AgentTask, ErrorKind

logger = logging.getLogger(__name__)


class PhaseStatus(str, Enum):
	"""Aggregate outcome of a phase."""
	COMPLETED = "completed"
	PARTIAL_FAILURE = "partial_failure"
	FAILED = "failed"


def summarize(results: Mapping[str, AgentResult]) -> PhaseStatus:
	"""Collapse per-task results into a phase status."""
	succeeded = sum(1 for r in results.values() if r.ok)
	if succeeded == len(results):
		return PhaseStatus.COMPLETED
	if succeeded == 0:
		return PhaseStatus.FAILED
	return PhaseStatus.PARTIAL_FAILURE


def _discard_late_result(future: asyncio.Future) -> None:
	"""Retrieve the outcome of an abandoned attempt so it is never reported."""
	if future.cancelled():
		return
	exc = future.exception()
	if exc is not None:
		logger.debug(f"Abandoned agent attempt finished with error: {exc!r}")


class PhaseRunner:
	"""
	Executes agent tasks with bounded concurrency, deadlines and one retry.

	Uses asyncio.Semaphore to limit concurrent agents within a run. Queue
	time spent waiting for a slot does not count against a task's deadline.
	"""

	def __init__(self, max_concurrent_agents: int = 5):
		"""
		Initialize the runner.

		Args:
			max_concurrent_agents: Maximum number of tasks executing at once
		"""
		if max_concurrent_agents <= 0:
			raise ValueError("max_concurrent_agents must be > 0")
		self.max_concurrent_agents = max_concurrent_agents
		self._active: Counter[str] = Counter()

	@property
	def active_agents(self) -> list[str]:
		"""Names of tasks currently executing, across all in-flight runs."""
		return sorted(name for name, count in self._active.items() if count > 0)

	async def run(self, tasks: Sequence[AgentTask]) -> dict[str, AgentResult]:
		"""
		Run all tasks concurrently and collect their results.

		Args:
			tasks: Tasks with unique names

		Returns:
			Mapping of task name to result, in the order the tasks were given

		Raises:
			ValueError: if two tasks share a name
		"""
		names = [task.name for task in tasks]
		duplicates = sorted(name for name, count in Counter(names).items() if count > 1)
		if duplicates:
			raise ValueError(f"Duplicate agent task names: {', '.join(duplicates)}")
		if not tasks:
			return {}

		semaphore = asyncio.Semaphore(self.max_concurrent_agents)
		results: dict[str, AgentResult] = {}

		async def execute(task: AgentTask) -> None:
			async with semaphore:
				results[task.name] = await self._execute_with_retry(task)

		# Fan out
		await asyncio.gather(*(asyncio.create_task(execute(task)) for task in tasks))

		# Fan in, insertion order rather than completion order
		ordered = {name: results[name] for name in names}
		logger.debug(f"Phase finished ({summarize(ordered).value}): {', '.join(names)}")
		return ordered

	async def _execute_with_retry(self, task: AgentTask) -> AgentResult:
		"""Run one task, retrying exactly once if allowed."""
		start = time.monotonic()
		max_attempts = 2 if task.retry_on_failure else 1
		attempts = 0

		while True:
			attempts += 1
			try:
				value = await self._attempt(task)
				return AgentResult.succeeded(value, _elapsed_ms(start), attempts)
			except AgentTimeout as e:
				error, message = ErrorKind.TIMEOUT, e.message
			except Exception as e:
				failure = AgentFailure(task.name, str(e) or type(e).__name__)
				error, message = ErrorKind.FAILURE, failure.message

			if attempts >= max_attempts:
				logger.warning(f"Agent {task.name} failed after {attempts} attempt(s): {message}")
				return AgentResult.failed(error, message, _elapsed_ms(start), attempts)

			logger.info(f"Retrying agent {task.name} after {error.value}: {message}")

	async def _attempt(self, task: AgentTask) -> Any:
		"""Run a single attempt against the task's deadline."""
		self._active[task.name] += 1
		try:
			inner = asyncio.ensure_future(task.run())
			if task.timeout_ms <= 0:
				return await inner

			try:
				done, _ = await asyncio.wait({inner}, timeout=task.timeout_ms / 1000)
			except asyncio.CancelledError:
				inner.cancel()
				raise

			if inner in done:
				return inner.result()

			# First deadline wins; a late result is dropped
			inner.cancel()
			inner.add_done_callback(_discard_late_result)
			raise AgentTimeout(task.name, task.timeout_ms)
		finally:
			self._active[task.name] -= 1
			if self._active[task.name] <= 0:
				del self._active[task.name]


def _elapsed_ms(start: float) -> int:
	return int(round((time.monotonic() - start) * 1000))
