"""Tests for prompt validation."""

import pytest

from queen_bee.errors import ProcessingError, ValidationFailure
from queen_bee.validation import (
	MAX_PROMPT_LENGTH,
	require_valid_prompt,
	sanitize_prompt,
	validate_prompt,
)


def test_valid_prompt():
	result = validate_prompt("  Write a parser  ")
	assert result.valid is True
	assert result.errors == []
	assert result.sanitized == "Write a parser"


@pytest.mark.parametrize("prompt", ["", "   \n\t", "\x00\x07 \x1b"])
def test_empty_prompt_rejected(prompt):
	result = validate_prompt(prompt)
	assert result.valid is False
	assert result.errors == ["Prompt must not be empty"]


@pytest.mark.parametrize("prompt", [None, 42, ["prompt"]])
def test_non_string_rejected(prompt):
	result = validate_prompt(prompt)
	assert result.valid is False
	assert "must be a string" in result.errors[0]


def test_length_limit():
	assert validate_prompt("x" * MAX_PROMPT_LENGTH).valid is True
	result = validate_prompt("x" * (MAX_PROMPT_LENGTH + 1))
	assert result.valid is False
	assert "maximum length" in result.errors[0]


@pytest.mark.parametrize("prompt,warning", [
	("Render ${user.name}", "template_injection"),
	("Add <script src='x'>", "script_tag"),
	("Link to javascript:alert(1)", "javascript_protocol"),
	('<img onerror="x">', "event_handler"),
])
def test_suspicious_patterns_warn_but_pass(prompt, warning):
	result = validate_prompt(prompt)
	assert result.valid is True
	assert result.warnings == [f"Suspicious pattern detected: {warning}"]


def test_sanitize_strips_control_characters():
	assert sanitize_prompt("a\x00b\x07c\nd\te") == "abc\nd\te"


class TestRequireValidPrompt:
	def test_returns_validation(self):
		assert require_valid_prompt("ok").valid is True

	def test_raises_with_all_errors(self):
		with pytest.raises(ValidationFailure) as exc_info:
			require_valid_prompt(" " * (MAX_PROMPT_LENGTH + 1))
		assert len(exc_info.value.errors) == 2
		assert exc_info.value.details == {"errors": exc_info.value.errors}

	def test_is_a_processing_error(self):
		with pytest.raises(ProcessingError):
			require_valid_prompt(None)
