"""Tests for prompt context classification."""

import pytest

from queen_bee.orchestrator.context import (
	DEFAULT_CONTEXT,
	Complexity,
	ContextClassifier,
	PromptContext,
	classify_context,
)


@pytest.fixture
def classifier():
	return ContextClassifier()


class TestFrameworkDetection:
	def test_react_hook_prompt(self, classifier):
		context = classifier.classify("Create a React component with a useState hook")
		assert context.is_react is True
		assert context.has_frontend is True
		assert context.is_api is False
		assert context.frameworks == ("React",)
		assert context.project_type == "frontend"

	def test_rest_api_prompt(self, classifier):
		context = classifier.classify("Add a REST API endpoint with FastAPI")
		assert context.is_api is True
		assert context.has_backend is True
		assert context.frameworks == ("FastAPI",)
		assert context.project_type == "backend"

	def test_frameworks_reported_in_detection_order(self, classifier):
		context = classifier.classify("Port the Django views to a Vue app")
		assert context.frameworks == ("Vue", "Django")
		assert context.project_type == "frontend"

	def test_fullstack_project_type(self, classifier):
		context = classifier.classify("Plan a full-stack todo app")
		assert context.project_type == "fullstack"

	def test_database_means_backend(self, classifier):
		context = classifier.classify("Tune the database indexes")
		assert context.has_backend is True
		assert context.is_api is False


class TestComplexity:
	def test_short_prompt_is_low(self, classifier):
		context = classifier.classify("Fix bug")
		assert context.complexity == Complexity.LOW
		assert context.frameworks == ()
		assert context.project_type == "general"

	def test_many_requirements_is_high(self, classifier):
		prompt = (
			"Design and implement a microservices architecture with authentication, "
			"and also add caching and rate limiting"
		)
		assert classifier.classify(prompt).complexity == Complexity.HIGH

	def test_word_count_tiers(self, classifier):
		assert classifier.assess_complexity("word " * 50) == Complexity.LOW
		assert classifier.assess_complexity("word " * 60) == Complexity.MEDIUM
		assert classifier.assess_complexity("word " * 120) == Complexity.HIGH

	def test_numbered_steps_are_high(self, classifier):
		prompt = "Tasks:\n1. Add login\n2. Add logout"
		assert classifier.assess_complexity(prompt) == Complexity.HIGH

	def test_first_then_is_high(self, classifier):
		assert classifier.assess_complexity("First read the file, then print it") == Complexity.HIGH

	def test_single_technical_term_is_not_enough(self, classifier):
		assert classifier.assess_complexity("Refactor this loop") == Complexity.LOW
		assert classifier.assess_complexity("Refactor and optimize this loop") == Complexity.HIGH


class TestPurity:
	def test_same_text_same_context(self, classifier):
		prompt = "Build a dashboard in Angular"
		assert classifier.classify(prompt) == classifier.classify(prompt)
		assert classify_context(prompt) == classifier.classify(prompt)

	@pytest.mark.parametrize("prompt", [None, 42, "", "   "])
	def test_unusable_input_gives_default(self, classifier, prompt):
		assert classifier.classify(prompt) == DEFAULT_CONTEXT

	def test_to_dict_keys(self):
		data = PromptContext(is_api=True, frameworks=("Express",)).to_dict()
		assert data == {
			"isReact": False,
			"hasFrontend": False,
			"isAPI": True,
			"hasBackend": False,
			"complexity": "low",
			"frameworks": ["Express"],
			"projectType": "general",
		}
