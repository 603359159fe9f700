"""Visualizer package - Rich terminal views for orchestration results."""

from .report import render_result, render_status

__all__ = [
	"render_result",
	"render_status",
]
