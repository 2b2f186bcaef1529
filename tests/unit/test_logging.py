"""Tests for logging configuration."""

import logging

import pytest
import structlog

from workflow_assistant.utils.logging import NOISY_LOGGERS, _level, configure_logging


@pytest.fixture(autouse=True)
def restore_logging():
    levels = {name: logging.getLogger(name).level for name in NOISY_LOGGERS}
    yield
    structlog.reset_defaults()
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


class TestConfigureLogging:
    """Test configure_logging."""

    def test_client_libraries_quieted(self):
        """Test HTTP and driver loggers stay at WARNING under DEBUG."""
        configure_logging("DEBUG")

        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_client_libraries_follow_higher_level(self):
        """Test a level above WARNING also applies to client libraries."""
        configure_logging("ERROR")

        assert logging.getLogger("httpx").level == logging.ERROR

    def test_console_renderer_by_default(self):
        """Test development output is rendered for the console."""
        configure_logging("INFO")

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
        assert processors[0] is structlog.contextvars.merge_contextvars

    def test_json_renderer(self):
        """Test json_logs switches to one JSON object per event."""
        configure_logging("INFO", json_logs=True)

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert structlog.processors.format_exc_info in processors

    def test_level_names(self):
        """Test level names resolve case-insensitively, unknown ones to INFO."""
        assert _level("debug") == logging.DEBUG
        assert _level("WARNING") == logging.WARNING
        assert _level("verbose") == logging.INFO
