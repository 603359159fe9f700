"""Prompt shape checks run before any agent is dispatched."""

import re
from dataclasses import dataclass, field
from typing import Any

from .errors import ValidationFailure

MAX_PROMPT_LENGTH = 10000

# Flagged but not rejected
SUSPICIOUS_PATTERNS = {
	"template_injection": re.compile(r"\$\{.*?\}"),
	"script_tag": re.compile(r"<script.*?>", re.IGNORECASE),
	"javascript_protocol": re.compile(r"javascript:", re.IGNORECASE),
	"event_handler": re.compile(r"\bon\w+\s*=", re.IGNORECASE),
}

# Control characters other than tab/newline/carriage return
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


@dataclass
class PromptValidation:
	"""Outcome of validating one prompt."""
	valid: bool
	errors: list[str] = field(default_factory=list)
	warnings: list[str] = field(default_factory=list)
	sanitized: str = ""


def sanitize_prompt(prompt: str) -> str:
	"""Strip control characters and surrounding whitespace."""
	return _CONTROL_CHARS.sub("", prompt).strip()


def validate_prompt(prompt: Any) -> PromptValidation:
	"""Check that a prompt is a non-empty string within the length limit."""
	if not isinstance(prompt, str):
		return PromptValidation(
			valid=False,
			errors=[f"Prompt must be a string, got {type(prompt).__name__}"],
		)

	errors: list[str] = []
	warnings: list[str] = []

	sanitized = sanitize_prompt(prompt)
	if not sanitized:
		errors.append("Prompt must not be empty")
	if len(prompt) > MAX_PROMPT_LENGTH:
		errors.append(f"Prompt exceeds maximum length ({MAX_PROMPT_LENGTH} characters)")

	for name, pattern in SUSPICIOUS_PATTERNS.items():
		if pattern.search(prompt):
			warnings.append(f"Suspicious pattern detected: {name}")

	return PromptValidation(
		valid=not errors,
		errors=errors,
		warnings=warnings,
		sanitized=sanitized if not errors else "",
	)


def require_valid_prompt(prompt: Any) -> PromptValidation:
	"""
	Validate a prompt, raising on failure.

	Raises:
		ValidationFailure: with every error found
	"""
	result = validate_prompt(prompt)
	if not result.valid:
		raise ValidationFailure("Invalid prompt: " + "; ".join(result.errors), result.errors)
	return result
