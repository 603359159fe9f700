"""
History Store - bounded, append-only log of orchestration runs.

Tracks how many runs scored at or above the high-quality bar and emits a
ThresholdCrossing event the moment that count reaches the extraction
minimum. The event fires once per crossing: it re-arms only after the count
drops below the minimum again (eviction or clear).
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from .context import PromptContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrchestrationRecord:
	"""One completed orchestrate() call."""
	original_prompt: str
	final_prompt: str
	original_score: float
	final_score: float
	improved: bool
	context: PromptContext
	timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class ThresholdCrossing:
	"""Emitted when the high-score count reaches the extraction minimum."""
	high_score_count: int
	min_score: int
	prompts: tuple[str, ...]


ThresholdListener = Callable[[ThresholdCrossing], None]


class HistoryStore:
	"""
	In-memory run history, safe for concurrent writers.

	Appends take a threading lock, so completions from concurrent runs (or
	threads) never lose updates.
	"""

	def __init__(
		self,
		high_quality: int,
		extraction_min: int,
		max_records: Optional[int] = None,
	):
		"""
		Initialize the store.

		Args:
			high_quality: Score at or above which a record counts as high-scoring
			extraction_min: High-score count that triggers pattern extraction
			max_records: Oldest records are evicted past this size (None = unbounded)
		"""
		self.high_quality = high_quality
		self.extraction_min = extraction_min
		self.max_records = max_records

		self._records: deque[OrchestrationRecord] = deque()
		self._high_count = 0
		self._lock = threading.Lock()
		self._listeners: list[ThresholdListener] = []

	def subscribe(self, listener: ThresholdListener) -> None:
		"""Register a callback for threshold crossings."""
		self._listeners.append(listener)

	def unsubscribe(self, listener: ThresholdListener) -> None:
		if listener in self._listeners:
			self._listeners.remove(listener)

	def is_high_scoring(self, record: OrchestrationRecord) -> bool:
		return record.final_score >= self.high_quality

	def append(self, record: OrchestrationRecord) -> Optional[ThresholdCrossing]:
		"""
		Append a record atomically.

		Returns:
			The crossing event if this append reached the extraction minimum
		"""
		with self._lock:
			before = self._high_count
			self._records.append(record)
			if self.is_high_scoring(record):
				self._high_count += 1

			if self.max_records is not None:
				while len(self._records) > self.max_records:
					evicted = self._records.popleft()
					if self.is_high_scoring(evicted):
						self._high_count -= 1

			after = self._high_count
			event = None
			if before < self.extraction_min <= after:
				event = ThresholdCrossing(
					high_score_count=after,
					min_score=self.high_quality,
					prompts=tuple(r.final_prompt for r in self._records if self.is_high_scoring(r)),
				)

		if event is not None:
			logger.info(
				f"High-scoring history reached {event.high_score_count} "
				f"(minimum {self.extraction_min}); pattern extraction due"
			)
			for listener in list(self._listeners):
				try:
					listener(event)
				except Exception as e:
					logger.warning(f"Threshold listener failed: {e}")
		return event

	@property
	def high_score_count(self) -> int:
		with self._lock:
			return self._high_count

	def high_scoring(self) -> list[OrchestrationRecord]:
		"""Snapshot of the records at or above the high-quality bar."""
		with self._lock:
			return [r for r in self._records if self.is_high_scoring(r)]

	def records(self) -> list[OrchestrationRecord]:
		"""Snapshot of all records, oldest first."""
		with self._lock:
			return list(self._records)

	def clear(self) -> None:
		with self._lock:
			self._records.clear()
			self._high_count = 0

	def __len__(self) -> int:
		with self._lock:
			return len(self._records)
