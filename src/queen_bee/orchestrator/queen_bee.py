"""
Queen Bee Orchestrator - Central coordinator for prompt operations.

Sequences one run per prompt:
- Phase 1: track, evaluate and classify context concurrently
- Gate: improve only when the score is below the improvement trigger
- Phase 2: rewrite, then re-score and track the rewritten prompt
- Record the run in history; crossing the high-score minimum kicks off
  pattern extraction in the background

Collaborator failures degrade a run (untracked, fallback score, original
prompt kept) instead of failing it. Only prompt validation raises.
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from ..config import FallbackMode, OrchestratorConfig, load_orchestrator_config, merge_config
from ..errors import ProcessingError
from ..validation import require_valid_prompt
from .collaborators import (
	NEUTRAL_SCORE,
	Collaborators,
	Evaluation,
	coerce_evaluation,
	coerce_improvement,
	coerce_receipt,
	heuristic_score,
)
from .context import DEFAULT_CONTEXT, ContextClassifier, PromptContext
from .gate import select_techniques, should_improve
from .history import HistoryStore, OrchestrationRecord
from .patterns import PatternExtractionWorker
from .runner import PhaseRunner, summarize
from .tasks import AgentResult, AgentTask, TaskKind

logger = logging.getLogger(__name__)


@dataclass
class OrchestrationResult:
	"""What orchestrate() returns."""
	success: bool
	original_prompt: str
	final_prompt: str
	original_score: float
	final_score: float
	improved: bool
	context: PromptContext
	improvement: float = 0
	metadata: dict[str, Any] = field(default_factory=dict)

	def to_dict(self) -> dict[str, Any]:
		return {
			"success": self.success,
			"originalPrompt": self.original_prompt,
			"finalPrompt": self.final_prompt,
			"originalScore": self.original_score,
			"finalScore": self.final_score,
			"improved": self.improved,
			"improvement": self.improvement,
			"context": self.context.to_dict(),
			"metadata": self.metadata,
		}


@dataclass
class OrchestratorStatus:
	"""Snapshot returned by get_status()."""
	active: bool
	config: OrchestratorConfig
	active_agents: list[str]
	history_size: int
	high_score_count: int
	latest_patterns: list[str] = field(default_factory=list)

	def to_dict(self) -> dict[str, Any]:
		return {
			"active": self.active,
			"config": self.config.to_dict(),
			"activeAgents": list(self.active_agents),
			"historySize": self.history_size,
			"highScoreCount": self.high_score_count,
			"latestPatterns": list(self.latest_patterns),
		}


@dataclass
class _Analysis:
	"""Phase 1 outcome after fallbacks are applied."""
	tracking_id: Optional[str]
	evaluation: Evaluation
	context: PromptContext
	results: dict[str, AgentResult]


@dataclass
class _Rewrite:
	"""Value produced by the improve agent."""
	prompt: str
	score: float
	techniques_applied: list[str]
	tracking_id: Optional[str] = None


class QueenBeeOrchestrator:
	"""
	Coordinates the tracking, evaluation, context and improvement agents.

	Owns its configuration (read-only for its lifetime) and its history.
	Concurrent orchestrate() calls are supported; each builds its own record.
	"""

	def __init__(
		self,
		config: Optional[OrchestratorConfig] = None,
		collaborators: Optional[Collaborators] = None,
	):
		"""
		Initialize the orchestrator.

		Args:
			config: Orchestrator policy (defaults when None)
			collaborators: External agents (local defaults when None)

		Raises:
			ConfigurationError: if the config fails validation
		"""
		self.config = (config or OrchestratorConfig()).validate()
		self.collaborators = collaborators or Collaborators()
		self.classifier = ContextClassifier()
		self.runner = PhaseRunner(self.config.parallelization.max_concurrent_agents)

		thresholds = self.config.thresholds
		self.history = HistoryStore(
			high_quality=thresholds.high_quality,
			extraction_min=thresholds.pattern_extraction_min,
			max_records=self.config.history.max_records,
		)
		self.pattern_worker = PatternExtractionWorker(
			self.collaborators.extract_patterns,
			limit=self.config.history.pattern_limit,
		)
		self.history.subscribe(self.pattern_worker.handle)

		logger.info(f"Queen Bee orchestrator ready (automatic activation: {self.config.activation.automatic})")
		if self.config.activation.debug_mode:
			logger.info(f"Configuration: {json.dumps(self.config.to_dict(), indent=2)}")

	@property
	def is_active(self) -> bool:
		"""Whether unsolicited prompts are orchestrated."""
		activation = self.config.activation
		return activation.automatic or activation.manual_override

	def _task(self, kind: TaskKind, run) -> AgentTask:
		parallelization = self.config.parallelization
		return AgentTask(
			name=kind.value,
			run=run,
			timeout_ms=parallelization.timeout_ms,
			retry_on_failure=parallelization.retry_on_failure,
			kind=kind,
		)

	async def orchestrate(
		self,
		prompt: str,
		*,
		skip_improvement: bool = False,
		force_improvement: bool = False,
	) -> OrchestrationResult:
		"""
		Run one prompt through analysis, the improvement gate and history.

		Args:
			prompt: Raw prompt text; control characters and outer whitespace are stripped
			skip_improvement: Never rewrite, whatever the score
			force_improvement: Rewrite even if the score clears the trigger

		Returns:
			OrchestrationResult; degraded runs still report success

		Raises:
			ValidationFailure: if the prompt fails shape checks
			ProcessingError: if both improvement overrides are set
		"""
		validation = require_valid_prompt(prompt)
		if skip_improvement and force_improvement:
			raise ProcessingError("skip_improvement and force_improvement are mutually exclusive")
		prompt = validation.sanitized

		start = time.monotonic()
		logger.info(f"Processing prompt ({len(prompt)} chars)")

		analysis = await self._analyze(prompt)
		original_score = analysis.evaluation.score

		if force_improvement:
			triggered = True
		elif skip_improvement:
			triggered = False
		else:
			triggered = should_improve(original_score, self.config)

		final_prompt, final_score, improved = prompt, original_score, False
		techniques_applied: list[str] = []
		improvement_results: dict[str, AgentResult] = {}

		if triggered:
			improvement_results = await self._improve(prompt, analysis.evaluation, analysis.context)
			rewrite_result = improvement_results[TaskKind.IMPROVE.value]
			if rewrite_result.ok and rewrite_result.value.prompt != prompt:
				rewrite: _Rewrite = rewrite_result.value
				final_prompt, final_score, improved = rewrite.prompt, rewrite.score, True
				techniques_applied = rewrite.techniques_applied
			elif rewrite_result.ok:
				logger.info("Improver returned the prompt unchanged; keeping original")
			else:
				logger.warning(f"Improvement unavailable ({rewrite_result.message}); keeping original prompt")
		else:
			logger.info(f"Score {original_score} clears trigger, skipping improvement")

		self.history.append(OrchestrationRecord(
			original_prompt=prompt,
			final_prompt=final_prompt,
			original_score=original_score,
			final_score=final_score,
			improved=improved,
			context=analysis.context,
		))

		duration_ms = int(round((time.monotonic() - start) * 1000))
		degraded = [
			name for name, result in {**analysis.results, **improvement_results}.items()
			if not result.ok
		]
		logger.info(f"Orchestration complete in {duration_ms}ms (score {original_score} -> {final_score})")

		return OrchestrationResult(
			success=True,
			original_prompt=prompt,
			final_prompt=final_prompt,
			original_score=original_score,
			final_score=final_score,
			improved=improved,
			context=analysis.context,
			improvement=final_score - original_score if improved else 0,
			metadata={
				"duration_ms": duration_ms,
				"tracking_id": analysis.tracking_id,
				"improvement_triggered": triggered,
				"techniques_applied": techniques_applied,
				"evaluation": analysis.evaluation.details,
				"degraded": degraded,
				"warnings": validation.warnings,
				"phases": {
					"analysis": _phase_metadata(analysis.results),
					"improvement": _phase_metadata(improvement_results) if improvement_results else None,
				},
			},
		)

	async def maybe_orchestrate(self, prompt: str) -> Optional[OrchestrationResult]:
		"""Entry point for intercepted prompts; None when activation is off."""
		if not self.is_active:
			logger.debug("Automatic activation disabled, prompt passed through")
			return None
		return await self.orchestrate(prompt)

	async def _analyze(self, prompt: str) -> _Analysis:
		"""Phase 1: parallel tracking, evaluation and context analysis."""

		async def track():
			return coerce_receipt(await self.collaborators.track(prompt, {"source": "queen_bee"}))

		async def evaluate():
			return coerce_evaluation(await self.collaborators.evaluate(prompt))

		async def classify():
			return self.classifier.classify(prompt)

		results = await self.runner.run([
			self._task(TaskKind.TRACK, track),
			self._task(TaskKind.EVALUATE, evaluate),
			self._task(TaskKind.CLASSIFY_CONTEXT, classify),
		])

		tracked = results[TaskKind.TRACK.value]
		if not tracked.ok:
			logger.warning(f"Tracking failed, continuing untracked: {tracked.message}")

		evaluated = results[TaskKind.EVALUATE.value]
		if evaluated.ok:
			evaluation = evaluated.value
		else:
			evaluation = self._fallback_evaluation(prompt, evaluated.message)

		classified = results[TaskKind.CLASSIFY_CONTEXT.value]
		context = classified.value if classified.ok else DEFAULT_CONTEXT

		return _Analysis(
			tracking_id=tracked.value.tracking_id if tracked.ok else None,
			evaluation=evaluation,
			context=context,
			results=results,
		)

	async def _improve(
		self,
		prompt: str,
		evaluation: Evaluation,
		context: PromptContext,
	) -> dict[str, AgentResult]:
		"""Phase 2: rewrite the prompt, then score and track the rewrite."""
		techniques = [t.value for t in select_techniques(context)]

		async def improve() -> _Rewrite:
			improvement = coerce_improvement(
				await self.collaborators.improve(prompt, evaluation, techniques)
			)
			if improvement.prompt == prompt:
				return _Rewrite(prompt=prompt, score=evaluation.score, techniques_applied=[])

			score, tracking_id = await asyncio.gather(
				self._rescore(improvement.prompt),
				self._track_quietly(improvement.prompt, {
					"improved": True,
					"techniques": improvement.techniques_applied,
				}),
			)
			return _Rewrite(
				prompt=improvement.prompt,
				score=score,
				techniques_applied=improvement.techniques_applied,
				tracking_id=tracking_id,
			)

		return await self.runner.run([self._task(TaskKind.IMPROVE, improve)])

	async def _rescore(self, prompt: str) -> float:
		try:
			return coerce_evaluation(await self.collaborators.evaluate(prompt)).score
		except Exception as e:
			logger.warning(f"Re-evaluation of improved prompt failed: {e}")
			return self._fallback_evaluation(prompt, str(e)).score

	async def _track_quietly(self, prompt: str, metadata: dict[str, Any]) -> Optional[str]:
		try:
			return coerce_receipt(await self.collaborators.track(prompt, metadata)).tracking_id
		except Exception as e:
			logger.warning(f"Failed to track improved prompt: {e}")
			return None

	def _fallback_evaluation(self, prompt: str, reason: str) -> Evaluation:
		mode = self.config.parallelization.fallback_mode
		if mode == FallbackMode.BASIC_TRACKING:
			score = heuristic_score(prompt)
		else:
			score = NEUTRAL_SCORE
		logger.warning(f"Evaluation unavailable ({reason}); using {mode.value} score {score}")
		return Evaluation(score=score, details={"fallback": mode.value, "reason": reason})

	def get_status(self) -> OrchestratorStatus:
		return OrchestratorStatus(
			active=self.is_active,
			config=self.config,
			active_agents=self.runner.active_agents,
			history_size=len(self.history),
			high_score_count=self.history.high_score_count,
			latest_patterns=list(self.pattern_worker.latest_patterns),
		)

	def clear_history(self) -> None:
		"""Empty the history; configuration is untouched."""
		self.history.clear()
		logger.info("Orchestration history cleared")

	async def aclose(self) -> None:
		"""Wait for background pattern extraction to finish."""
		await self.pattern_worker.drain()


def _phase_metadata(results: dict[str, AgentResult]) -> dict[str, Any]:
	return {
		"status": summarize(results).value,
		"agents": {name: result.to_dict() for name, result in results.items()},
	}


# Process-wide instance
_instance: Optional[QueenBeeOrchestrator] = None


def get_instance() -> QueenBeeOrchestrator:
	"""Get or lazily create the process-wide orchestrator."""
	global _instance
	if _instance is None:
		_instance = QueenBeeOrchestrator(load_orchestrator_config())
	return _instance


def reset_instance(
	overrides: Optional[Mapping[str, Any]] = None,
	collaborators: Optional[Collaborators] = None,
) -> QueenBeeOrchestrator:
	"""
	Replace the process-wide orchestrator, discarding its history.

	Overrides are merged onto the loaded defaults. On ConfigurationError the
	previous instance stays in place.
	"""
	global _instance
	config = merge_config(load_orchestrator_config(), overrides)
	_instance = QueenBeeOrchestrator(config, collaborators)
	return _instance


def clear_history() -> None:
	"""Clear the process-wide orchestrator's history."""
	get_instance().clear_history()
