"""Orchestrator module - phase runner, context, gate, history and the Queen Bee coordinator."""

from .collaborators import Collaborators, Evaluation, Improvement, PatternReport, TrackingReceipt
from .context import Complexity, ContextClassifier, PromptContext, classify_context
from .gate import Technique, select_techniques, should_improve, should_skip
from .history import HistoryStore, OrchestrationRecord, ThresholdCrossing
from .patterns import PatternExtractionWorker
from .queen_bee import (
	OrchestrationResult,
	OrchestratorStatus,
	QueenBeeOrchestrator,
	clear_history,
	get_instance,
	reset_instance,
)
from .runner import PhaseRunner, PhaseStatus
from .tasks import AgentResult, AgentTask, ErrorKind, TaskKind

__all__ = [
	"AgentResult",
	"AgentTask",
	"Collaborators",
	"Complexity",
	"ContextClassifier",
	"ErrorKind",
	"Evaluation",
	"HistoryStore",
	"Improvement",
	"OrchestrationRecord",
	"OrchestrationResult",
	"OrchestratorStatus",
	"PatternExtractionWorker",
	"PatternReport",
	"PhaseRunner",
	"PhaseStatus",
	"PromptContext",
	"QueenBeeOrchestrator",
	"TaskKind",
	"Technique",
	"ThresholdCrossing",
	"TrackingReceipt",
	"classify_context",
	"clear_history",
	"get_instance",
	"reset_instance",
	"select_techniques",
	"should_improve",
	"should_skip",
]
