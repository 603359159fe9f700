"""Orchestrator tools - run prompts through the Queen Bee coordinator."""

import json
import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP

from ..config import Settings
from ..errors import ProcessingError
from ..orchestrator.queen_bee import QueenBeeOrchestrator, get_instance

logger = logging.getLogger(__name__)


async def orchestrate_prompt_json(
	prompt: str,
	skip_improvement: bool = False,
	force_improvement: bool = False,
	orchestrator: Optional[QueenBeeOrchestrator] = None,
) -> str:
	"""Run a prompt and serialize the result; input errors become JSON errors."""
	orchestrator = orchestrator or get_instance()
	try:
		result = await orchestrator.orchestrate(
			prompt,
			skip_improvement=skip_improvement,
			force_improvement=force_improvement,
		)
	except ProcessingError as e:
		logger.info(f"Rejected prompt: {e.message}")
		return json.dumps({
			"success": False,
			"error": e.message,
			"details": e.details,
			"originalPrompt": prompt if isinstance(prompt, str) else None,
		}, indent=2)
	return json.dumps(result.to_dict(), indent=2, default=str)


def status_json(orchestrator: Optional[QueenBeeOrchestrator] = None) -> str:
	orchestrator = orchestrator or get_instance()
	return json.dumps(orchestrator.get_status().to_dict(), indent=2)


def register_orchestrator_tools(mcp: FastMCP, settings: Settings) -> None:
	"""Register orchestration tools."""

	@mcp.tool()
	async def orchestrate_prompt(
		prompt: str,
		skip_improvement: bool = False,
		force_improvement: bool = False,
	) -> str:
		"""
		Orchestrate prompt evaluation and improvement.

		Tracks, scores and classifies the prompt in parallel, rewrites it when
		the score is below the improvement trigger, and records the run.

		Args:
			prompt: The prompt to orchestrate
			skip_improvement: Never rewrite the prompt
			force_improvement: Rewrite even high-scoring prompts
		"""
		return await orchestrate_prompt_json(prompt, skip_improvement, force_improvement)

	@mcp.tool()
	async def orchestrator_status() -> str:
		"""Current configuration, running agents and history counters."""
		return status_json()

	@mcp.tool()
	async def clear_orchestrator_history() -> str:
		"""Empty the orchestration history without changing configuration."""
		orchestrator = get_instance()
		orchestrator.clear_history()
		return json.dumps({"success": True, "historySize": len(orchestrator.history)})
