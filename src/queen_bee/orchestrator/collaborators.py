"""
Collaborator contracts consumed by the orchestrator, plus local defaults.

The real tracker, judge, rewriter and pattern miner live outside this
package; the orchestrator only needs async callables with these shapes.
Results may be the dataclasses below or plain dicts (camelCase or
snake_case keys); anything else is treated as an agent failure.
"""

import logging
import re
import uuid
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Protocol, Sequence

from .gate import Technique

logger = logging.getLogger(__name__)


@dataclass
class TrackingReceipt:
	tracking_id: str
	metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class Evaluation:
	score: float
	details: dict[str, Any] = field(default_factory=dict)


@dataclass
class Improvement:
	prompt: str
	techniques_applied: list[str] = field(default_factory=list)


@dataclass
class PatternReport:
	patterns: list[str] = field(default_factory=list)
	prompts_analyzed: int = 0


class Tracker(Protocol):
	def __call__(self, prompt: str, metadata: Optional[dict[str, Any]] = None) -> Awaitable[Any]: ...


class Evaluator(Protocol):
	def __call__(self, prompt: str, prompt_id: Optional[str] = None) -> Awaitable[Any]: ...


class Improver(Protocol):
	def __call__(
		self,
		prompt: str,
		evaluation: Evaluation,
		techniques: Optional[Sequence[str]] = None,
	) -> Awaitable[Any]: ...


class PatternExtractor(Protocol):
	def __call__(self, prompts: Sequence[str], min_score: float, limit: int) -> Awaitable[Any]: ...


# -- result coercion --

def _is_number(value: Any) -> bool:
	return isinstance(value, (int, float)) and not isinstance(value, bool)


def coerce_receipt(value: Any) -> TrackingReceipt:
	if isinstance(value, TrackingReceipt):
		return value
	if isinstance(value, str) and value:
		return TrackingReceipt(tracking_id=value)
	if isinstance(value, dict):
		tracking_id = value.get("trackingId") or value.get("tracking_id") or value.get("id")
		if tracking_id:
			return TrackingReceipt(tracking_id=str(tracking_id), metadata=dict(value))
	raise ValueError(f"Tracker returned no tracking id: {value!r}")


def coerce_evaluation(value: Any) -> Evaluation:
	if isinstance(value, Evaluation):
		score, details = value.score, value.details
	elif isinstance(value, dict) and "score" in value:
		score = value["score"]
		details = value.get("details") or {k: v for k, v in value.items() if k != "score"}
	else:
		raise ValueError(f"Evaluator returned no score: {value!r}")

	if not _is_number(score) or not 0 <= score <= 100:
		raise ValueError(f"Evaluator score must be a number within 0..100, got {score!r}")
	return Evaluation(score=score, details=dict(details))


def coerce_improvement(value: Any) -> Improvement:
	if isinstance(value, Improvement):
		improvement = value
	elif isinstance(value, dict):
		prompt = value.get("prompt") or value.get("improved")
		applied = value.get("techniquesApplied") or value.get("techniques_applied") or []
		improvement = Improvement(prompt=prompt, techniques_applied=list(applied))
	else:
		raise ValueError(f"Improver returned an unusable result: {value!r}")

	if not isinstance(improvement.prompt, str) or not improvement.prompt.strip():
		raise ValueError("Improver returned an empty prompt")
	return improvement


def coerce_patterns(value: Any) -> PatternReport:
	if isinstance(value, PatternReport):
		return value
	if isinstance(value, dict) and isinstance(value.get("patterns"), list):
		return PatternReport(
			patterns=[str(p) for p in value["patterns"]],
			prompts_analyzed=int(value.get("promptsAnalyzed") or value.get("prompts_analyzed") or 0),
		)
	raise ValueError(f"Pattern extractor returned no patterns: {value!r}")


# -- local defaults --

NEUTRAL_SCORE = 50


def heuristic_score(prompt: str) -> int:
	"""Cheap local score used when no judge is available."""
	score = NEUTRAL_SCORE
	lowered = prompt.lower()

	if len(prompt) > 50:
		score += 10
	if "please" in lowered or "could" in lowered:
		score += 5
	if re.search(r"\b(implement|create|build|develop)\b", lowered):
		score += 10
	if re.search(r"\b(specific|detailed|clear)\b", lowered):
		score += 5
	if "example" in lowered:
		score += 10

	return min(100, score)


async def local_track(prompt: str, metadata: Optional[dict[str, Any]] = None) -> TrackingReceipt:
	"""Issue an in-process tracking id; nothing is stored."""
	receipt = TrackingReceipt(tracking_id=uuid.uuid4().hex, metadata=dict(metadata or {}))
	logger.debug(f"Tracked prompt ({len(prompt)} chars) as {receipt.tracking_id}")
	return receipt


async def heuristic_evaluate(prompt: str, prompt_id: Optional[str] = None) -> Evaluation:
	return Evaluation(
		score=heuristic_score(prompt),
		details={"simulated": True, "prompt_id": prompt_id},
	)


# Each technique: (already-present pattern, section to add, prepend?)
_SECTIONS: dict[Technique, tuple[str, str, bool]] = {
	Technique.CHAIN_OF_THOUGHT: (
		r"step by step|<thinking>",
		"Think through the problem step by step before giving the final answer.",
		True,
	),
	Technique.FEW_SHOT_EXAMPLES: (
		r"\bexamples?\b",
		"Examples:\n- Show one concrete example of the expected input and output.",
		False,
	),
	Technique.COMPONENT_STRUCTURE: (
		r"component structure|props interface",
		"Structure: define the component's props, state and child components explicitly.",
		False,
	),
	Technique.ACCESSIBILITY_FOCUS: (
		r"accessib|aria",
		"Accessibility: use semantic elements, ARIA labels and keyboard navigation.",
		False,
	),
	Technique.ERROR_HANDLING: (
		r"error handling|edge cases?",
		"Error handling: describe expected failures, edge cases and how each is reported.",
		False,
	),
	Technique.VALIDATION_EMPHASIS: (
		r"\bvalidat",
		"Validation: validate every input and state the rules for rejecting bad data.",
		False,
	),
	Technique.CLARITY: (
		r"success criteria|acceptance criteria",
		"Success criteria: state clearly what a complete, correct result looks like.",
		False,
	),
	Technique.SPECIFICITY: (
		r"\bspecific\b|\bconstraints?\b",
		"Be specific: name the language, versions, constraints and the expected output format.",
		False,
	),
}


def apply_technique(prompt: str, technique: Technique) -> Optional[str]:
	"""Add a technique's section to the prompt, or None if it is already covered."""
	present, section, prepend = _SECTIONS[technique]
	if re.search(present, prompt, re.IGNORECASE):
		return None
	return f"{section}\n\n{prompt}" if prepend else f"{prompt}\n\n{section}"


async def template_improve(
	prompt: str,
	evaluation: Evaluation,
	techniques: Optional[Sequence[str]] = None,
) -> Improvement:
	"""Insert a short section per requested technique."""
	requested = [Technique(t) for t in (techniques or [Technique.CLARITY, Technique.SPECIFICITY])]
	improved = prompt.strip()
	applied: list[str] = []
	for technique in requested:
		updated = apply_technique(improved, technique)
		if updated is not None:
			improved = updated
			applied.append(technique.value)
	if not applied:
		return Improvement(prompt=prompt, techniques_applied=[])
	return Improvement(prompt=improved, techniques_applied=applied)


_STOPWORDS = {
	"the", "and", "for", "with", "that", "this", "from", "into", "your", "have",
	"will", "should", "must", "using", "use", "are", "all", "each", "when", "then",
}

_STRUCTURE_PATTERNS = {
	"numbered steps": re.compile(r"^\s*\d+[.)]\s", re.MULTILINE),
	"concrete examples": re.compile(r"\bexamples?\b", re.IGNORECASE),
	"explicit success criteria": re.compile(r"success criteria|acceptance criteria", re.IGNORECASE),
	"error handling instructions": re.compile(r"error handling|edge cases?", re.IGNORECASE),
	"tagged sections": re.compile(r"<\w+>"),
}


async def keyword_patterns(prompts: Sequence[str], min_score: float, limit: int) -> PatternReport:
	"""Recurring structure and vocabulary across high-scoring prompts."""
	if not prompts:
		return PatternReport(patterns=[], prompts_analyzed=0)

	patterns: list[str] = []
	quorum = max(2, (len(prompts) + 1) // 2)

	for name, pattern in _STRUCTURE_PATTERNS.items():
		hits = sum(1 for p in prompts if pattern.search(p))
		if hits >= quorum:
			patterns.append(f"structure:{name}")

	document_freq: Counter[str] = Counter()
	for prompt in prompts:
		words = {w for w in re.findall(r"[a-z][a-z0-9.+-]{3,}", prompt.lower()) if w not in _STOPWORDS}
		document_freq.update(words)
	for word, count in document_freq.most_common():
		if count < quorum:
			break
		patterns.append(f"keyword:{word}")

	return PatternReport(patterns=patterns[:limit], prompts_analyzed=len(prompts))


@dataclass
class Collaborators:
	"""The external agents an orchestrator dispatches to."""
	track: Callable[..., Awaitable[Any]] = local_track
	evaluate: Callable[..., Awaitable[Any]] = heuristic_evaluate
	improve: Callable[..., Awaitable[Any]] = template_improve
	extract_patterns: Callable[..., Awaitable[Any]] = keyword_patterns
