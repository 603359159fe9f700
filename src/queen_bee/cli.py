"""CLI for queen-bee: orchestrate, status, serve and doctor commands."""

import argparse
import asyncio
import json
import platform
import sys
from importlib.metadata import version as pkg_version

from .config import get_settings, load_orchestrator_config
from .errors import ConfigurationError, ProcessingError
from .logging_config import setup_logging
from .orchestrator.queen_bee import QueenBeeOrchestrator, get_instance, reset_instance


def _read_prompt(args: argparse.Namespace) -> str:
	"""Prompt from the positional argument, or stdin when it is '-'."""
	if args.prompt == "-":
		return sys.stdin.read()
	return args.prompt


def _build_orchestrator(config_override: str | None) -> QueenBeeOrchestrator:
	"""Process-wide orchestrator, rebuilt with JSON overrides if given."""
	if not config_override:
		return get_instance()
	try:
		overrides = json.loads(config_override)
	except json.JSONDecodeError as e:
		print(f"Invalid --config-override JSON: {e}")
		sys.exit(1)
	return reset_instance(overrides)


def cmd_orchestrate(args: argparse.Namespace) -> None:
	"""Run one prompt through the orchestrator."""
	from .visualizer import render_result

	setup_logging(level=args.log_level)
	try:
		orchestrator = _build_orchestrator(args.config_override)
	except ConfigurationError as e:
		print(f"Configuration error: {e.message}")
		sys.exit(1)

	async def run():
		try:
			return await orchestrator.orchestrate(
				_read_prompt(args),
				skip_improvement=args.skip_improvement,
				force_improvement=args.force_improvement,
			)
		finally:
			await orchestrator.aclose()

	try:
		result = asyncio.run(run())
	except ProcessingError as e:
		print(f"Invalid prompt: {e.message}")
		sys.exit(1)

	if args.json:
		print(json.dumps(result.to_dict(), indent=2, default=str))
	else:
		render_result(result, orchestrator.config)


def cmd_status(args: argparse.Namespace) -> None:
	"""Show the orchestrator configuration and counters."""
	from .visualizer import render_status

	try:
		status = get_instance().get_status()
	except ConfigurationError as e:
		print(f"Configuration error: {e.message}")
		sys.exit(1)

	if args.json:
		print(json.dumps(status.to_dict(), indent=2))
	else:
		render_status(status)


def cmd_serve(args: argparse.Namespace) -> None:
	"""Run the MCP server (stdio transport)."""
	settings = get_settings()
	settings.ensure_dirs()
	setup_logging(level=settings.log_level, log_dir=settings.log_dir)

	from .server import mcp
	mcp.run()


def _check_orchestrator_config() -> tuple[str, str | None]:
	"""Load config.toml + env overrides. Returns (status, issue_or_none)."""
	try:
		settings = get_settings()
		load_orchestrator_config(settings)
	except ConfigurationError as e:
		return f"INVALID ({e.message})", f"orchestrator config: {e.message}"
	if not settings.config_file.exists():
		return "defaults (no config.toml)", None
	return "valid", None


REQUIRED_PACKAGES = ["mcp", "platformdirs", "python-dotenv", "rich"]


def _check_dependencies() -> list[tuple[str, str, str | None]]:
	"""One (name, version_or_status, issue_or_none) row per required package."""
	rows = []
	for package in REQUIRED_PACKAGES:
		try:
			rows.append((package, pkg_version(package), None))
		except Exception:
			rows.append((package, "NOT INSTALLED", f"{package} package not installed"))
	return rows


def _check_server_startup() -> tuple[str, str | None]:
	"""Import the server and count its tools. Returns (status, issue_or_none)."""
	try:
		from .server import mcp as server
		tool_count = len(server._tool_manager._tools)
	except Exception as e:
		return f"FAILED ({e})", f"MCP server failed to start: {e}"
	return f"OK ({tool_count} tools registered)", None


def cmd_doctor(args: argparse.Namespace) -> None:
	"""Verify dependencies, orchestrator config and server startup."""
	config_status, config_issue = _check_orchestrator_config()
	server_status, server_issue = _check_server_startup()
	dependencies = _check_dependencies()

	sections = [
		("Environment", [
			("python", platform.python_version(), None),
			("platform", f"{platform.system()} {platform.machine()}", None),
		]),
		("Dependencies", dependencies),
		("Orchestrator", [("config", config_status, config_issue)]),
		("Server", [("mcp", server_status, server_issue)]),
	]

	print("queen-bee doctor")
	issues: list[str] = []
	for title, rows in sections:
		print(f"\n  {title}:")
		for name, value, issue in rows:
			print(f"    {name:16s} {value}")
			if issue:
				issues.append(issue)

	print()
	if not issues:
		print("  All checks passed.")
		return
	print(f"  {len(issues)} issue(s) found:")
	for issue in issues:
		print(f"    - {issue}")
	sys.exit(1)


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(
		prog="queen-bee",
		description="Prompt orchestration: track, evaluate, improve and mine patterns",
	)
	subparsers = parser.add_subparsers(dest="command")

	# orchestrate
	orchestrate_parser = subparsers.add_parser("orchestrate", help="Run a prompt through the orchestrator")
	orchestrate_parser.add_argument("prompt", help="Prompt text, or '-' to read stdin")
	orchestrate_parser.add_argument("--json", action="store_true", help="Print the raw JSON result")
	orchestrate_parser.add_argument(
		"--config-override",
		type=str,
		default=None,
		help='JSON overrides, e.g. \'{"thresholds": {"improvement_trigger": 60}}\'',
	)
	improvement = orchestrate_parser.add_mutually_exclusive_group()
	improvement.add_argument("--skip-improvement", action="store_true", help="Never rewrite the prompt")
	improvement.add_argument("--force-improvement", action="store_true", help="Always rewrite the prompt")
	orchestrate_parser.add_argument("--log-level", type=str, default="WARNING", help="Log level (default: WARNING)")
	orchestrate_parser.set_defaults(func=cmd_orchestrate)

	# status
	status_parser = subparsers.add_parser("status", help="Show configuration and history counters")
	status_parser.add_argument("--json", action="store_true", help="Print the raw JSON status")
	status_parser.set_defaults(func=cmd_status)

	# serve
	serve_parser = subparsers.add_parser("serve", help="Run MCP server (stdio)")
	serve_parser.set_defaults(func=cmd_serve)

	# doctor
	doctor_parser = subparsers.add_parser("doctor", help="Health check")
	doctor_parser.set_defaults(func=cmd_doctor)

	return parser


def main() -> None:
	"""CLI entry point."""
	parser = build_parser()
	args = parser.parse_args()

	if not args.command:
		parser.print_help()
		sys.exit(1)

	args.func(args)
