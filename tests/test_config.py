"""Tests for the configuration system."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from queen_bee.config import (
	FallbackMode,
	OrchestratorConfig,
	Settings,
	ThresholdsConfig,
	_apply_env_overrides,
	load_orchestrator_config,
	load_settings,
	merge_config,
)
from queen_bee.errors import ConfigurationError


def test_settings_defaults():
	"""Settings should derive paths from the config and data dirs."""
	settings = Settings()
	assert settings.config_dir.is_absolute()
	assert settings.data_dir.is_absolute()
	assert settings.config_file == settings.config_dir / "config.toml"
	assert settings.log_dir == settings.data_dir / "logs"


def test_settings_env_overrides():
	"""Environment variables should override defaults."""
	settings = Settings()
	with patch.dict(os.environ, {
		"QUEEN_BEE_DATA_DIR": "/tmp/qb-data",
		"QUEEN_BEE_CONFIG_DIR": "/tmp/qb-config",
	}):
		settings = _apply_env_overrides(settings)
		assert settings.data_dir == Path("/tmp/qb-data")
		assert settings.config_dir == Path("/tmp/qb-config")
		# Derived paths should be recomputed
		assert settings.log_dir == Path("/tmp/qb-data/logs")
		assert settings.config_file == Path("/tmp/qb-config/config.toml")


def test_settings_ensure_dirs(tmp_path: Path):
	"""ensure_dirs should create all required directories."""
	settings = Settings(config_dir=tmp_path / "config", data_dir=tmp_path / "data")
	assert not settings.config_dir.exists()

	settings.ensure_dirs()

	assert settings.config_dir.exists()
	assert settings.data_dir.exists()
	assert settings.log_dir.exists()


def test_load_settings_reads_orchestrator_tables(isolated_settings: Path):
	config_dir = isolated_settings / "config"
	config_dir.mkdir(parents=True)
	(config_dir / "config.toml").write_text(
		'log_level = "DEBUG"\n'
		"\n"
		"[orchestrator.thresholds]\n"
		"improvement_trigger = 60\n"
		"high_quality = 90\n"
	)

	settings = load_settings()
	assert settings.log_level == "DEBUG"
	assert settings.orchestrator == {"thresholds": {"improvement_trigger": 60, "high_quality": 90}}

	config = load_orchestrator_config(settings)
	assert config.thresholds.improvement_trigger == 60
	assert config.thresholds.high_quality == 90
	assert config.thresholds.pattern_extraction_min == 10


def test_load_settings_rejects_broken_toml(isolated_settings: Path):
	config_dir = isolated_settings / "config"
	config_dir.mkdir(parents=True)
	(config_dir / "config.toml").write_text("this is = = not toml")

	with pytest.raises(ConfigurationError):
		load_settings()


def test_orchestrator_env_overrides_win_over_toml(isolated_settings: Path, monkeypatch):
	config_dir = isolated_settings / "config"
	config_dir.mkdir(parents=True)
	(config_dir / "config.toml").write_text("[orchestrator.parallelization]\ntimeout_ms = 1000\n")
	monkeypatch.setenv("QUEEN_BEE_TIMEOUT_MS", "250")
	monkeypatch.setenv("QUEEN_BEE_RETRY_ON_FAILURE", "false")
	monkeypatch.setenv("QUEEN_BEE_FALLBACK_MODE", "default_score")

	config = load_orchestrator_config(load_settings())
	assert config.parallelization.timeout_ms == 250
	assert config.parallelization.retry_on_failure is False
	assert config.parallelization.fallback_mode == FallbackMode.DEFAULT_SCORE


def test_orchestrator_env_rejects_non_integer(monkeypatch):
	monkeypatch.setenv("QUEEN_BEE_HIGH_QUALITY", "very")
	with pytest.raises(ConfigurationError, match="QUEEN_BEE_HIGH_QUALITY"):
		load_orchestrator_config(load_settings())


@pytest.mark.parametrize("raw", ["banana", "2", "enabled"])
def test_orchestrator_env_rejects_unknown_boolean(monkeypatch, raw):
	monkeypatch.setenv("QUEEN_BEE_AUTOMATIC", raw)
	with pytest.raises(ConfigurationError, match="QUEEN_BEE_AUTOMATIC must be a boolean"):
		load_orchestrator_config(load_settings())


@pytest.mark.parametrize("raw,expected", [("Yes", True), (" off ", False), ("1", True), ("0", False)])
def test_orchestrator_env_boolean_spellings(monkeypatch, raw, expected):
	monkeypatch.setenv("QUEEN_BEE_AUTOMATIC", raw)
	assert load_orchestrator_config(load_settings()).activation.automatic is expected


class TestOrchestratorConfig:
	def test_defaults(self):
		config = OrchestratorConfig()
		assert config.activation.automatic is True
		assert config.parallelization.max_concurrent_agents == 5
		assert config.parallelization.timeout_ms == 5000
		assert config.parallelization.retry_on_failure is True
		assert config.parallelization.fallback_mode == FallbackMode.BASIC_TRACKING
		assert config.thresholds.improvement_trigger == 70
		assert config.thresholds.high_quality == 85
		assert config.thresholds.pattern_extraction_min == 10
		assert config.history.max_records == 100

	def test_defaults_are_valid(self):
		assert OrchestratorConfig().validate() == OrchestratorConfig()

	def test_trigger_above_high_quality_is_rejected(self):
		config = OrchestratorConfig(thresholds=ThresholdsConfig(improvement_trigger=90, high_quality=80))
		with pytest.raises(ConfigurationError, match="improvement_trigger"):
			config.validate()

	def test_trigger_equal_to_high_quality_is_allowed(self):
		config = OrchestratorConfig(thresholds=ThresholdsConfig(improvement_trigger=80, high_quality=80))
		assert config.validate() is config

	@pytest.mark.parametrize("overrides", [
		{"parallelization": {"max_concurrent_agents": 0}},
		{"parallelization": {"timeout_ms": -1}},
		{"thresholds": {"high_quality": 101}},
		{"thresholds": {"improvement_trigger": -5}},
		{"thresholds": {"pattern_extraction_min": 0}},
		{"history": {"max_records": 0}},
	])
	def test_out_of_range_values_are_rejected(self, overrides):
		with pytest.raises(ConfigurationError):
			merge_config(OrchestratorConfig(), overrides)

	def test_all_problems_are_reported(self):
		with pytest.raises(ConfigurationError) as exc_info:
			merge_config(None, {
				"parallelization": {"max_concurrent_agents": 0, "timeout_ms": -1},
			})
		assert len(exc_info.value.details["problems"]) == 2

	def test_to_dict_is_json_ready(self):
		data = OrchestratorConfig().to_dict()
		assert data["parallelization"]["fallback_mode"] == "basic_tracking"
		assert data["thresholds"]["high_quality"] == 85


class TestMergeConfig:
	def test_merge_touches_only_named_fields(self):
		merged = merge_config(OrchestratorConfig(), {"thresholds": {"high_quality": 90}})
		assert merged.thresholds.high_quality == 90
		assert merged.thresholds.improvement_trigger == 70
		assert merged.parallelization == OrchestratorConfig().parallelization

	def test_merge_without_overrides_returns_base(self):
		base = OrchestratorConfig()
		assert merge_config(base, None) is base

	def test_merge_accepts_section_dataclass(self):
		thresholds = ThresholdsConfig(improvement_trigger=50, high_quality=60, pattern_extraction_min=2)
		merged = merge_config(None, {"thresholds": thresholds})
		assert merged.thresholds is thresholds

	def test_fallback_mode_string_is_coerced(self):
		merged = merge_config(None, {"parallelization": {"fallback_mode": "default_score"}})
		assert merged.parallelization.fallback_mode is FallbackMode.DEFAULT_SCORE

	def test_unknown_fallback_mode_rejected(self):
		with pytest.raises(ConfigurationError, match="fallback_mode"):
			merge_config(None, {"parallelization": {"fallback_mode": "panic"}})

	def test_unknown_section_rejected(self):
		with pytest.raises(ConfigurationError, match="Unknown config section"):
			merge_config(None, {"agents": {}})

	def test_unknown_key_rejected(self):
		with pytest.raises(ConfigurationError, match="Unknown config key"):
			merge_config(None, {"thresholds": {"excellent": 99}})

	def test_wrong_types_rejected(self):
		with pytest.raises(ConfigurationError, match="integer"):
			merge_config(None, {"parallelization": {"timeout_ms": "fast"}})
		with pytest.raises(ConfigurationError, match="boolean"):
			merge_config(None, {"activation": {"automatic": 1}})
		with pytest.raises(ConfigurationError, match="integer"):
			merge_config(None, {"thresholds": {"high_quality": True}})

	def test_non_mapping_overrides_rejected(self):
		with pytest.raises(ConfigurationError):
			merge_config(None, ["thresholds"])
		with pytest.raises(ConfigurationError):
			merge_config(None, {"thresholds": 5})
