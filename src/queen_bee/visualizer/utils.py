"""Formatting helpers shared by the result and status views."""

from typing import Optional


def format_duration(milliseconds: float) -> str:
	"""Human-readable agent or run duration: '<1ms', '45ms', '1.2s', '2m 3s'."""
	if milliseconds < 1:
		return "<1ms"
	if milliseconds < 1000:
		return f"{milliseconds:.0f}ms"
	seconds = milliseconds / 1000
	if seconds < 60:
		return f"{seconds:.1f}s"
	minutes, remainder = divmod(seconds, 60)
	return f"{int(minutes)}m {remainder:.0f}s"


def truncate_prompt(prompt: str, max_len: int = 60) -> str:
	"""Collapse whitespace and shorten a prompt to a single table-friendly line."""
	flat = " ".join((prompt or "").split())
	if len(flat) > max_len:
		flat = flat[:max_len - 3] + "..."
	return flat


def score_style(score: float, improvement_trigger: int = 70, high_quality: int = 85) -> str:
	"""Rich style for a score relative to the configured thresholds."""
	if score >= high_quality:
		return "green"
	if score >= improvement_trigger:
		return "yellow"
	return "red"


def outcome_markup(ok: bool, error: Optional[str] = None) -> str:
	"""Rich markup for one agent outcome: OK, or the upper-cased error kind."""
	if ok:
		return "[green]OK[/green]"
	return f"[red]{(error or 'failure').upper()}[/red]"
