"""queen-bee MCP server."""

from mcp.server.fastmcp import FastMCP

from .config import get_settings
from .tools import register_all_tools

mcp = FastMCP("queen-bee")
settings = get_settings()
register_all_tools(mcp, settings)
