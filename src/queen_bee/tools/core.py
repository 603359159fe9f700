"""Server health tool."""

import json

from mcp.server.fastmcp import FastMCP

from ..config import Settings
from ..orchestrator.queen_bee import get_instance


def register_core_tools(mcp: FastMCP, settings: Settings) -> None:
	"""Register the health tool."""

	@mcp.tool()
	async def health_check() -> str:
		"""
		Report server paths and whether the orchestrator is ready.

		Builds the process-wide orchestrator if needed, so a broken
		config.toml shows up here as orchestrator "error".
		"""
		report = {
			"server": "running",
			"config_dir": str(settings.config_dir),
			"config_file_exists": settings.config_file.exists(),
			"data_dir": str(settings.data_dir),
			"log_level": settings.log_level,
		}
		try:
			orchestrator = get_instance()
		except Exception as e:
			report["orchestrator"] = "error"
			report["orchestrator_error"] = str(e)
		else:
			report["orchestrator"] = "active" if orchestrator.is_active else "inactive"
			report["history_size"] = len(orchestrator.history)
		return json.dumps(report, indent=2)
