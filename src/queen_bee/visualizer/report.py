"""Result and status views."""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import OrchestratorConfig
from ..orchestrator.queen_bee import OrchestrationResult, OrchestratorStatus
from .utils import format_duration, outcome_markup, score_style, truncate_prompt


def render_result(
	result: OrchestrationResult,
	config: Optional[OrchestratorConfig] = None,
	console: Optional[Console] = None,
) -> None:
	"""Render one orchestration result: scores, context and agent outcomes."""
	console = console or Console()
	thresholds = (config or OrchestratorConfig()).thresholds

	def styled(score: float) -> str:
		style = score_style(score, thresholds.improvement_trigger, thresholds.high_quality)
		return f"[{style}]{score:g}[/{style}]"

	metadata = result.metadata
	summary = (
		f"[bold]Score:[/bold] {styled(result.original_score)} -> {styled(result.final_score)}  |  "
		f"[bold]Improved:[/bold] {'yes' if result.improved else 'no'}  |  "
		f"[bold]Duration:[/bold] {format_duration(metadata.get('duration_ms', 0))}"
	)
	console.print(Panel(summary, title="Orchestration", border_style="cyan"))

	context = result.context
	table = Table(title="Context")
	table.add_column("Field", style="cyan")
	table.add_column("Value")
	table.add_row("Complexity", context.complexity.value)
	table.add_row("Project type", context.project_type)
	table.add_row("Frameworks", ", ".join(context.frameworks) or "-")
	table.add_row("Frontend / Backend", f"{context.has_frontend} / {context.has_backend}")
	console.print(table)

	phases = metadata.get("phases") or {}
	agents = Table(title="Agents")
	agents.add_column("Phase")
	agents.add_column("Agent", style="cyan")
	agents.add_column("Duration", justify="right")
	agents.add_column("Attempts", justify="right")
	agents.add_column("Status", justify="center")
	for phase_name, phase in phases.items():
		if not phase:
			continue
		for agent_name, outcome in phase["agents"].items():
			agents.add_row(
				phase_name,
				agent_name,
				format_duration(outcome["duration_ms"]),
				str(outcome["attempts"]),
				outcome_markup(outcome["ok"], outcome["error"]),
			)
	console.print(agents)

	if result.improved:
		applied = ", ".join(metadata.get("techniques_applied") or []) or "-"
		console.print(Panel(result.final_prompt, title=f"Improved prompt ({applied})", border_style="green"))
	else:
		console.print(f"[dim]Prompt kept as is: {truncate_prompt(result.original_prompt)}[/dim]")


def render_status(status: OrchestratorStatus, console: Optional[Console] = None) -> None:
	"""Render the orchestrator status."""
	console = console or Console()
	config = status.config

	table = Table(title="Queen Bee Status")
	table.add_column("Setting", style="cyan")
	table.add_column("Value")
	table.add_row("Active", "[green]yes[/green]" if status.active else "[red]no (automatic activation off)[/red]")
	table.add_row("Active agents", ", ".join(status.active_agents) or "-")
	table.add_row("History size", str(status.history_size))
	table.add_row(
		"High-scoring runs",
		f"{status.high_score_count} / {config.thresholds.pattern_extraction_min} needed for extraction",
	)
	table.add_row("Improvement trigger", f"< {config.thresholds.improvement_trigger}")
	table.add_row("High quality", f">= {config.thresholds.high_quality}")
	table.add_row("Timeout", format_duration(config.parallelization.timeout_ms) if config.parallelization.timeout_ms else "none")
	table.add_row("Max concurrent agents", str(config.parallelization.max_concurrent_agents))
	table.add_row("Retry on failure", str(config.parallelization.retry_on_failure))
	table.add_row("Fallback mode", config.parallelization.fallback_mode.value)
	console.print(table)

	if status.latest_patterns:
		console.print(Panel("\n".join(status.latest_patterns), title="Latest patterns", border_style="green"))
