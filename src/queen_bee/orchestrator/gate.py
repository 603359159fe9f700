"""Improvement gate: whether a prompt gets rewritten, and with which techniques."""

from enum import Enum

from ..config import OrchestratorConfig
from .context import Complexity, PromptContext


class Technique(str, Enum):
	"""Rewriting techniques an improver may be asked to apply."""
	CHAIN_OF_THOUGHT = "chain_of_thought"
	FEW_SHOT_EXAMPLES = "few_shot_examples"
	COMPONENT_STRUCTURE = "component_structure"
	ACCESSIBILITY_FOCUS = "accessibility_focus"
	ERROR_HANDLING = "error_handling"
	VALIDATION_EMPHASIS = "validation_emphasis"
	CLARITY = "clarity"
	SPECIFICITY = "specificity"


def should_improve(evaluation_score: float, config: OrchestratorConfig) -> bool:
	"""True iff the score is strictly below the improvement trigger."""
	return evaluation_score < config.thresholds.improvement_trigger


def should_skip(evaluation_score: float, config: OrchestratorConfig) -> bool:
	"""True when quality already clears the bar and the prompt is kept verbatim."""
	return not should_improve(evaluation_score, config)


def select_techniques(context: PromptContext) -> list[Technique]:
	"""Pick techniques suited to the prompt's context."""
	techniques: list[Technique] = []

	if context.complexity == Complexity.HIGH:
		techniques += [Technique.CHAIN_OF_THOUGHT, Technique.FEW_SHOT_EXAMPLES]
	if context.is_react or context.has_frontend:
		techniques += [Technique.COMPONENT_STRUCTURE, Technique.ACCESSIBILITY_FOCUS]
	if context.is_api or context.has_backend:
		techniques += [Technique.ERROR_HANDLING, Technique.VALIDATION_EMPHASIS]

	if not techniques:
		techniques = [Technique.CLARITY, Technique.SPECIFICITY]
	return techniques
