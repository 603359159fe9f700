"""Tests for server startup and tool registration."""

import json

import pytest


def test_server_imports():
	"""Server module should import without errors."""
	from queen_bee.server import mcp
	assert mcp is not None


def test_server_tool_names():
	"""Server should register every orchestrator tool."""
	from queen_bee.server import mcp
	tool_names = set(mcp._tool_manager._tools.keys())

	expected = {
		"health_check",
		"orchestrate_prompt",
		"orchestrator_status",
		"clear_orchestrator_history",
	}
	missing = expected - tool_names
	assert not missing, f"Missing tools: {missing}"


@pytest.mark.asyncio
async def test_health_check_tool():
	from queen_bee.server import mcp
	health_check = mcp._tool_manager._tools["health_check"].fn

	status = json.loads(await health_check())
	assert status["server"] == "running"
	assert status["orchestrator"] == "active"
	assert status["history_size"] == 0
	assert "config_dir" in status
	assert status["config_file_exists"] in (True, False)


@pytest.mark.asyncio
async def test_clear_history_tool():
	from queen_bee.orchestrator import get_instance
	from queen_bee.orchestrator.context import PromptContext
	from queen_bee.orchestrator.history import OrchestrationRecord
	from queen_bee.server import mcp

	get_instance().history.append(OrchestrationRecord(
		original_prompt="p",
		final_prompt="p",
		original_score=90,
		final_score=90,
		improved=False,
		context=PromptContext(),
	))
	clear = mcp._tool_manager._tools["clear_orchestrator_history"].fn

	assert json.loads(await clear()) == {"success": True, "historySize": 0}
	assert len(get_instance().history) == 0
