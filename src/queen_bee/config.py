"""
Configuration for the orchestrator.

Two layers:
- Settings: where things live on disk (platformdirs), mutable, loaded once.
- OrchestratorConfig: the immutable activation/parallelization/threshold
  policy handed to an orchestrator instance.

Precedence for both: env vars > config.toml > defaults.
"""

import os
import tomllib
from dataclasses import asdict, dataclass, field, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional

import platformdirs
from dotenv import load_dotenv

from .errors import ConfigurationError

APP_NAME = "queen-bee"
APP_AUTHOR = "queen-bee"


class FallbackMode(str, Enum):
	"""Degraded scoring used when the evaluation agent is unavailable."""
	BASIC_TRACKING = "basic_tracking"  # local heuristic scorer
	DEFAULT_SCORE = "default_score"  # fixed neutral score


@dataclass(frozen=True)
class ActivationConfig:
	"""Whether orchestration runs for unsolicited prompts."""
	automatic: bool = True
	manual_override: bool = False
	debug_mode: bool = False


@dataclass(frozen=True)
class ParallelizationConfig:
	"""Concurrency, deadline and failure policy for agent tasks."""
	max_concurrent_agents: int = 5
	timeout_ms: int = 5000  # 0 disables the deadline
	retry_on_failure: bool = True
	fallback_mode: FallbackMode = FallbackMode.BASIC_TRACKING


@dataclass(frozen=True)
class ThresholdsConfig:
	"""Score cutoffs (0..100) driving improvement and pattern extraction."""
	improvement_trigger: int = 70
	high_quality: int = 85
	pattern_extraction_min: int = 10


@dataclass(frozen=True)
class HistoryConfig:
	"""Bounds on in-process run history."""
	max_records: int = 100
	pattern_limit: int = 20


@dataclass(frozen=True)
class OrchestratorConfig:
	"""Complete orchestrator configuration."""

	activation: ActivationConfig = field(default_factory=ActivationConfig)
	parallelization: ParallelizationConfig = field(default_factory=ParallelizationConfig)
	thresholds: ThresholdsConfig = field(default_factory=ThresholdsConfig)
	history: HistoryConfig = field(default_factory=HistoryConfig)

	def validate(self) -> "OrchestratorConfig":
		"""
		Check value ranges and threshold ordering.

		Raises:
			ConfigurationError: listing every problem found
		"""
		problems: list[str] = []
		par = self.parallelization
		thr = self.thresholds

		if par.max_concurrent_agents <= 0:
			problems.append("parallelization.max_concurrent_agents must be > 0")
		if par.timeout_ms < 0:
			problems.append("parallelization.timeout_ms must be >= 0")
		for name in ("improvement_trigger", "high_quality"):
			value = getattr(thr, name)
			if not 0 <= value <= 100:
				problems.append(f"thresholds.{name} must be within 0..100 (got {value})")
		if thr.pattern_extraction_min < 1:
			problems.append("thresholds.pattern_extraction_min must be >= 1")
		if thr.improvement_trigger > thr.high_quality:
			problems.append(
				f"thresholds.improvement_trigger ({thr.improvement_trigger}) "
				f"must not exceed thresholds.high_quality ({thr.high_quality})"
			)
		if self.history.max_records < 1:
			problems.append("history.max_records must be >= 1")
		if self.history.pattern_limit < 1:
			problems.append("history.pattern_limit must be >= 1")

		if problems:
			raise ConfigurationError(
				"Invalid orchestrator configuration: " + "; ".join(problems),
				{"problems": problems},
			)
		return self

	def to_dict(self) -> dict[str, Any]:
		"""JSON-ready nested dict."""
		data = asdict(self)
		data["parallelization"]["fallback_mode"] = self.parallelization.fallback_mode.value
		return data


_SECTIONS: dict[str, type] = {
	"activation": ActivationConfig,
	"parallelization": ParallelizationConfig,
	"thresholds": ThresholdsConfig,
	"history": HistoryConfig,
}


def _coerce(section: str, key: str, expected: Any, value: Any) -> Any:
	"""Type-check a single override value against its field type."""
	label = f"{section}.{key}"
	if expected is bool:
		if not isinstance(value, bool):
			raise ConfigurationError(f"{label} must be a boolean, got {type(value).__name__}")
		return value
	if expected is int:
		if isinstance(value, bool) or not isinstance(value, int):
			raise ConfigurationError(f"{label} must be an integer, got {type(value).__name__}")
		return value
	if expected is FallbackMode:
		try:
			return FallbackMode(value)
		except ValueError:
			allowed = ", ".join(m.value for m in FallbackMode)
			raise ConfigurationError(f"{label} must be one of: {allowed} (got {value!r})") from None
	return value


def merge_config(
	base: Optional[OrchestratorConfig] = None,
	overrides: Optional[Mapping[str, Any]] = None,
) -> OrchestratorConfig:
	"""
	Merge partial overrides onto a base config, section by section.

	Args:
		base: Starting config (defaults when None)
		overrides: e.g. {"thresholds": {"high_quality": 90}}. Section values
			may also be complete section dataclasses.

	Returns:
		A new validated OrchestratorConfig

	Raises:
		ConfigurationError: unknown section/key, wrong type, or invalid result
	"""
	base = base or OrchestratorConfig()
	if not overrides:
		return base.validate()
	if not isinstance(overrides, Mapping):
		raise ConfigurationError(f"Config overrides must be a mapping, got {type(overrides).__name__}")

	sections: dict[str, Any] = {}
	for name, values in overrides.items():
		section_cls = _SECTIONS.get(name)
		if section_cls is None:
			raise ConfigurationError(f"Unknown config section: {name}")
		if isinstance(values, section_cls):
			sections[name] = values
			continue
		if not isinstance(values, Mapping):
			raise ConfigurationError(f"Config section '{name}' must be a mapping")

		known = {f.name: f.type for f in fields(section_cls)}
		changes = {}
		for key, value in values.items():
			if key not in known:
				raise ConfigurationError(f"Unknown config key: {name}.{key}")
			changes[key] = _coerce(name, key, known[key], value)
		sections[name] = replace(getattr(base, name), **changes)

	return replace(base, **sections).validate()


# -- on-disk settings --

@dataclass
class Settings:
	"""Filesystem locations and raw overrides, following XDG/platform conventions."""

	config_dir: Path = field(default_factory=lambda: Path(platformdirs.user_config_dir(APP_NAME)))
	data_dir: Path = field(default_factory=lambda: Path(platformdirs.user_data_dir(APP_NAME)))
	log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

	# Derived paths
	config_file: Path = field(init=False)
	log_dir: Path = field(init=False)

	# [orchestrator.*] tables from config.toml
	orchestrator: dict[str, Any] = field(default_factory=dict)

	def __post_init__(self) -> None:
		self.config_file = self.config_dir / "config.toml"
		self.log_dir = self.data_dir / "logs"

	def ensure_dirs(self) -> None:
		"""Create all required directories."""
		self.config_dir.mkdir(parents=True, exist_ok=True)
		self.data_dir.mkdir(parents=True, exist_ok=True)
		self.log_dir.mkdir(parents=True, exist_ok=True)


def _apply_env_overrides(settings: Settings) -> Settings:
	"""Apply QUEEN_BEE_* path overrides."""
	env_map = {
		"QUEEN_BEE_CONFIG_DIR": "config_dir",
		"QUEEN_BEE_DATA_DIR": "data_dir",
	}
	for env_key, attr in env_map.items():
		val = os.getenv(env_key)
		if val:
			setattr(settings, attr, Path(val))
	# Recompute derived paths after overrides
	settings.__post_init__()
	return settings


def _apply_toml(settings: Settings) -> Settings:
	"""Apply config.toml if it exists."""
	toml_path = settings.config_dir / "config.toml"
	if not toml_path.exists():
		return settings

	try:
		with open(toml_path, "rb") as f:
			data = tomllib.load(f)
	except tomllib.TOMLDecodeError as e:
		raise ConfigurationError(f"Could not parse {toml_path}: {e}") from e

	for key in ("config_dir", "data_dir"):
		if key in data:
			setattr(settings, key, Path(os.path.expanduser(data[key])))
	if "log_level" in data:
		settings.log_level = str(data["log_level"])
	if isinstance(data.get("orchestrator"), dict):
		settings.orchestrator = data["orchestrator"]

	settings.__post_init__()
	return settings


def load_settings() -> Settings:
	"""Load settings with precedence: env vars > config.toml > defaults."""
	load_dotenv()
	settings = Settings()
	settings = _apply_env_overrides(settings)
	settings = _apply_toml(settings)
	# Env wins over paths set in the toml
	return _apply_env_overrides(settings)


# env var -> (section, key, parser)
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}

ORCHESTRATOR_ENV_MAP: dict[str, tuple[str, str, str]] = {
	"QUEEN_BEE_AUTOMATIC": ("activation", "automatic", "bool"),
	"QUEEN_BEE_DEBUG": ("activation", "debug_mode", "bool"),
	"QUEEN_BEE_MAX_CONCURRENT_AGENTS": ("parallelization", "max_concurrent_agents", "int"),
	"QUEEN_BEE_TIMEOUT_MS": ("parallelization", "timeout_ms", "int"),
	"QUEEN_BEE_RETRY_ON_FAILURE": ("parallelization", "retry_on_failure", "bool"),
	"QUEEN_BEE_FALLBACK_MODE": ("parallelization", "fallback_mode", "str"),
	"QUEEN_BEE_IMPROVEMENT_TRIGGER": ("thresholds", "improvement_trigger", "int"),
	"QUEEN_BEE_HIGH_QUALITY": ("thresholds", "high_quality", "int"),
	"QUEEN_BEE_PATTERN_EXTRACTION_MIN": ("thresholds", "pattern_extraction_min", "int"),
}


def _env_orchestrator_overrides() -> dict[str, dict[str, Any]]:
	overrides: dict[str, dict[str, Any]] = {}
	for env_key, (section, key, kind) in ORCHESTRATOR_ENV_MAP.items():
		raw = os.getenv(env_key)
		if raw is None or raw == "":
			continue
		if kind == "bool":
			flag = raw.strip().lower()
			if flag not in _TRUE_VALUES | _FALSE_VALUES:
				raise ConfigurationError(f"{env_key} must be a boolean (got {raw!r})")
			value: Any = flag in _TRUE_VALUES
		elif kind == "int":
			try:
				value = int(raw)
			except ValueError:
				raise ConfigurationError(f"{env_key} must be an integer (got {raw!r})") from None
		else:
			value = raw.strip()
		overrides.setdefault(section, {})[key] = value
	return overrides


def load_orchestrator_config(settings: Optional[Settings] = None) -> OrchestratorConfig:
	"""Build the default OrchestratorConfig from config.toml and env vars."""
	settings = settings or get_settings()
	config = merge_config(OrchestratorConfig(), settings.orchestrator)
	return merge_config(config, _env_orchestrator_overrides())


# Singleton
_settings: Settings | None = None


def get_settings() -> Settings:
	"""Get or create the global settings instance."""
	global _settings
	if _settings is None:
		_settings = load_settings()
	return _settings
