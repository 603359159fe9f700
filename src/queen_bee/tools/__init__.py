"""MCP tool registration."""

import logging

from mcp.server.fastmcp import FastMCP

from ..config import Settings
from .core import register_core_tools
from .orchestrator import register_orchestrator_tools

logger = logging.getLogger(__name__)


def register_all_tools(mcp: FastMCP, settings: Settings) -> None:
	"""Register all MCP tools."""
	register_core_tools(mcp, settings)
	register_orchestrator_tools(mcp, settings)
	logger.debug("Registered queen-bee MCP tools")
