"""
Context Classifier - derives a structured context from raw prompt text.

Keyword and pattern matching only: no I/O, no model calls, never raises.
The same text always yields an equal PromptContext.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Complexity(str, Enum):
	LOW = "low"
	MEDIUM = "medium"
	HIGH = "high"


@dataclass(frozen=True)
class PromptContext:
	"""What a prompt is about, as far as keyword matching can tell."""
	is_react: bool = False
	has_frontend: bool = False
	is_api: bool = False
	has_backend: bool = False
	complexity: Complexity = Complexity.LOW
	frameworks: tuple[str, ...] = field(default_factory=tuple)
	project_type: str = "general"

	def to_dict(self) -> dict[str, Any]:
		return {
			"isReact": self.is_react,
			"hasFrontend": self.has_frontend,
			"isAPI": self.is_api,
			"hasBackend": self.has_backend,
			"complexity": self.complexity.value,
			"frameworks": list(self.frameworks),
			"projectType": self.project_type,
		}


DEFAULT_CONTEXT = PromptContext()


class ContextClassifier:
	"""Classifies prompts into frameworks, project type and complexity tier."""

	REACT_KEYWORDS = [
		"react", "component", "jsx", "tsx", "hook", "usestate",
		"useeffect", "props", "state", "redux", "next.js",
	]

	API_KEYWORDS = [
		"api", "endpoint", "rest", "graphql", "backend",
		"server", "route", "request", "response", "fastapi",
	]

	FRONTEND_PATTERN = re.compile(r"ui|frontend|component|css|html", re.IGNORECASE)
	BACKEND_PATTERN = re.compile(r"backend|server|database|auth", re.IGNORECASE)

	# Checked in this order; detection order is the order frameworks are reported
	FRAMEWORK_PATTERNS = {
		"React": re.compile(r"react|jsx|tsx", re.IGNORECASE),
		"Vue": re.compile(r"vue", re.IGNORECASE),
		"Angular": re.compile(r"angular", re.IGNORECASE),
		"Next.js": re.compile(r"next\.?js", re.IGNORECASE),
		"Express": re.compile(r"express", re.IGNORECASE),
		"FastAPI": re.compile(r"fastapi", re.IGNORECASE),
		"Django": re.compile(r"django", re.IGNORECASE),
		"Rails": re.compile(r"rails|ruby", re.IGNORECASE),
	}

	CONJUNCTION_PATTERN = re.compile(r"\b(and|also|additionally|furthermore)\b", re.IGNORECASE)
	TECHNICAL_PATTERN = re.compile(r"\b(implement|optimi[sz]e|refactor|architect|design)\w*", re.IGNORECASE)
	MULTI_STEP_PATTERNS = [
		re.compile(r"^\s*\d+[.)]\s+\S", re.MULTILINE),  # numbered list
		re.compile(r"\bstep\s+\d+\b", re.IGNORECASE),
		re.compile(r"\bfirst\b.*\bthen\b", re.IGNORECASE | re.DOTALL),
	]

	HIGH_WORD_COUNT = 100
	MEDIUM_WORD_COUNT = 50
	MAX_CONJUNCTIONS = 2
	MAX_TECHNICAL_TERMS = 1

	def classify(self, prompt: str) -> PromptContext:
		"""
		Derive the context of a prompt.

		Non-string input yields the default (low complexity, general) context.
		"""
		if not isinstance(prompt, str) or not prompt.strip():
			return DEFAULT_CONTEXT

		lowered = prompt.lower()
		is_react = any(keyword in lowered for keyword in self.REACT_KEYWORDS)
		is_api = any(keyword in lowered for keyword in self.API_KEYWORDS)
		frameworks = self.detect_frameworks(prompt)

		return PromptContext(
			is_react=is_react,
			has_frontend=is_react or bool(self.FRONTEND_PATTERN.search(prompt)),
			is_api=is_api,
			has_backend=is_api or bool(self.BACKEND_PATTERN.search(prompt)),
			complexity=self.assess_complexity(prompt),
			frameworks=frameworks,
			project_type=self.infer_project_type(prompt, frameworks),
		)

	def detect_frameworks(self, prompt: str) -> tuple[str, ...]:
		return tuple(
			name for name, pattern in self.FRAMEWORK_PATTERNS.items()
			if pattern.search(prompt)
		)

	def assess_complexity(self, prompt: str) -> Complexity:
		"""Word-count tiering, pushed to HIGH by multi-requirement language."""
		word_count = len(prompt.split())
		many_requirements = len(self.CONJUNCTION_PATTERN.findall(prompt)) > self.MAX_CONJUNCTIONS
		technical = len(self.TECHNICAL_PATTERN.findall(prompt)) > self.MAX_TECHNICAL_TERMS
		multi_step = any(p.search(prompt) for p in self.MULTI_STEP_PATTERNS)

		if word_count > self.HIGH_WORD_COUNT or many_requirements or technical or multi_step:
			return Complexity.HIGH
		if word_count > self.MEDIUM_WORD_COUNT:
			return Complexity.MEDIUM
		return Complexity.LOW

	def infer_project_type(self, prompt: str, frameworks: tuple[str, ...]) -> str:
		if "React" in frameworks or "Vue" in frameworks:
			return "frontend"
		if "FastAPI" in frameworks or "Express" in frameworks:
			return "backend"
		lowered = prompt.lower()
		if "full-stack" in lowered or "fullstack" in lowered:
			return "fullstack"
		return "general"


_classifier = ContextClassifier()


def classify_context(prompt: str) -> PromptContext:
	"""Classify with the shared module-level classifier."""
	return _classifier.classify(prompt)
