"""
Pattern extraction worker.

Consumes ThresholdCrossing events from the history store and runs the
pattern-extraction collaborator in the background. Nothing here is ever
awaited by orchestrate(); failures are logged and dropped.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from .collaborators import coerce_patterns
from .history import ThresholdCrossing

logger = logging.getLogger(__name__)


class PatternExtractionWorker:
	"""Fire-and-forget runner for pattern extraction."""

	def __init__(
		self,
		extract_patterns: Callable[..., Awaitable[Any]],
		limit: int = 20,
	):
		"""
		Initialize the worker.

		Args:
			extract_patterns: Collaborator (prompts, min_score, limit) -> patterns
			limit: Maximum number of patterns to request
		"""
		self.extract_patterns = extract_patterns
		self.limit = limit

		self.latest_patterns: list[str] = []
		self.extractions = 0
		self._tasks: set[asyncio.Task] = set()
		self._pending: Optional[ThresholdCrossing] = None

	@property
	def in_progress(self) -> bool:
		return any(not t.done() for t in self._tasks)

	def handle(self, event: ThresholdCrossing) -> Optional[asyncio.Task]:
		"""
		Schedule an extraction for a threshold crossing.

		A crossing that arrives while an extraction is running is held and
		scheduled when that extraction finishes. Only the latest one is kept.

		Returns:
			The scheduled task, or None if held or skipped
		"""
		try:
			loop = asyncio.get_running_loop()
		except RuntimeError:
			logger.warning("No running event loop; pattern extraction skipped")
			return None

		if self.in_progress:
			logger.info("Pattern extraction in progress; queued crossing for after it finishes")
			self._pending = event
			return None
		return self._schedule(loop, event)

	def _schedule(self, loop: asyncio.AbstractEventLoop, event: ThresholdCrossing) -> asyncio.Task:
		task = loop.create_task(self._extract(event))
		# Keep a strong reference until the task finishes
		self._tasks.add(task)
		task.add_done_callback(self._on_done)
		return task

	def _on_done(self, task: asyncio.Task) -> None:
		self._tasks.discard(task)
		if task.cancelled():
			self._pending = None
		if self._pending is None or self.in_progress:
			return
		event, self._pending = self._pending, None
		self._schedule(task.get_loop(), event)

	async def _extract(self, event: ThresholdCrossing) -> None:
		logger.info(f"Extracting patterns from {len(event.prompts)} high-scoring prompts")
		try:
			raw = await self.extract_patterns(list(event.prompts), event.min_score, self.limit)
			report = coerce_patterns(raw)
		except Exception as e:
			logger.warning(f"Pattern extraction failed: {e}")
			return

		self.latest_patterns = list(report.patterns)
		self.extractions += 1
		logger.info(f"Extracted {len(report.patterns)} patterns")
		for pattern in report.patterns:
			logger.debug(f"  - {pattern}")

	async def drain(self) -> None:
		"""Wait for every in-flight extraction to finish."""
		while self._tasks:
			await asyncio.gather(*list(self._tasks), return_exceptions=True)
