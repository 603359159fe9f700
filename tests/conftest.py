"""Shared fixtures: isolate settings and the process-wide orchestrator per test."""

import pytest

import queen_bee.config as config_module
import queen_bee.orchestrator.queen_bee as queen_bee_module
from queen_bee.config import ORCHESTRATOR_ENV_MAP


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
	"""Point settings at a temp dir and drop any cached singletons."""
	monkeypatch.setenv("QUEEN_BEE_CONFIG_DIR", str(tmp_path / "config"))
	monkeypatch.setenv("QUEEN_BEE_DATA_DIR", str(tmp_path / "data"))
	for env_key in ORCHESTRATOR_ENV_MAP:
		monkeypatch.delenv(env_key, raising=False)
	monkeypatch.setattr(config_module, "_settings", None)
	monkeypatch.setattr(queen_bee_module, "_instance", None)
	yield tmp_path
