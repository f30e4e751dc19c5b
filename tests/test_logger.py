"""
Tests for console and run-log setup.
"""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from forecaster import settings
from forecaster.logger import resolve_level, setup_logger


@pytest.fixture
def fresh_logger():
    created = []

    def make(name, **kwargs):
        created.append(name)
        return setup_logger(f"forecaster.tests.{name}", **kwargs)

    yield make

    for name in created:
        logger = logging.getLogger(f"forecaster.tests.{name}")
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)


class TestResolveLevel:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("debug", logging.DEBUG),
            (" WARNING ", logging.WARNING),
            (logging.ERROR, logging.ERROR),
            ("chatty", logging.INFO),
        ],
    )
    def test_values(self, value, expected):
        assert resolve_level(value) == expected

    def test_defaults_to_configured_level(self, monkeypatch):
        monkeypatch.setattr(settings, "LOG_LEVEL", "error")
        assert resolve_level(None) == logging.ERROR


class TestSetupLogger:
    def test_writes_run_log(self, fresh_logger, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        logger = fresh_logger("file", log_level="debug", log_file=log_file)

        assert logger.level == logging.DEBUG
        assert any(isinstance(h, RotatingFileHandler) for h in logger.handlers)

        logger.debug("counted 12 rows")
        for handler in logger.handlers:
            handler.flush()
        content = log_file.read_text(encoding="utf-8")
        assert "DEBUG" in content
        assert "counted 12 rows" in content

    def test_console_only_when_file_logging_is_off(self, fresh_logger, monkeypatch):
        monkeypatch.setattr(settings, "LOG_TO_FILE", False)
        logger = fresh_logger("console")
        assert len(logger.handlers) == 1
        assert not isinstance(logger.handlers[0], RotatingFileHandler)

    def test_repeat_setup_keeps_handlers_and_updates_level(
        self, fresh_logger, monkeypatch
    ):
        monkeypatch.setattr(settings, "LOG_TO_FILE", False)
        fresh_logger("repeat", log_level="info")
        logger = fresh_logger("repeat", log_level="warning")
        assert len(logger.handlers) == 1
        assert logger.level == logging.WARNING
        assert logger.handlers[0].level == logging.WARNING

    def test_library_loggers_are_quieted(self, fresh_logger, monkeypatch):
        monkeypatch.setattr(settings, "LOG_TO_FILE", False)
        fresh_logger("quiet", log_level="debug")
        assert logging.getLogger("urllib3").level == logging.WARNING
