"""Tests for logging setup."""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from queen_bee.logging_config import ROOT_LOGGER, setup_logging


@pytest.fixture(autouse=True)
def clean_logger():
	logger = logging.getLogger(ROOT_LOGGER)
	handlers, level = list(logger.handlers), logger.level
	logger.handlers = []
	yield logger
	for handler in logger.handlers:
		handler.close()
	logger.handlers = handlers
	logger.setLevel(level)


def test_console_only_by_default():
	logger = setup_logging(level="DEBUG")
	assert logger.level == logging.DEBUG
	assert len(logger.handlers) == 1
	assert not isinstance(logger.handlers[0], RotatingFileHandler)


def test_file_handler_when_log_dir_given(tmp_path):
	logger = setup_logging(level="INFO", log_dir=tmp_path / "logs")
	file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
	assert len(file_handlers) == 1
	assert (tmp_path / "logs").is_dir()

	logging.getLogger("queen_bee.orchestrator.runner").info("phase finished")
	file_handlers[0].flush()
	assert "phase finished" in (tmp_path / "logs" / "queen_bee.log").read_text()


def test_setup_is_idempotent():
	setup_logging(level="INFO")
	logger = setup_logging(level="WARNING")
	assert len(logger.handlers) == 1
	assert logger.level == logging.WARNING


def test_level_from_environment(monkeypatch):
	monkeypatch.setenv("LOG_LEVEL", "ERROR")
	assert setup_logging().level == logging.ERROR


def test_unknown_level_falls_back_to_info():
	assert setup_logging(level="chatty").level == logging.INFO


def test_module_loggers_propagate_to_package_logger():
	logger = setup_logging(level="INFO")
	child = logging.getLogger("queen_bee.orchestrator.history")
	assert child.getEffectiveLevel() == logging.INFO
