"""
Tests for logging configuration.
"""

import json

import structlog

from task_engine.config_loader import LoggingConfig, LogLevel
from task_engine.logging_config import LogContext, configure_from_config, configure_logging


class TestConfigureLogging:
    """Test cases for configure_logging."""

    def test_json_file_output_with_context(self, tmp_path, reset_logging):
        """Test that bound context reaches the log file."""
        log_file = tmp_path / "logs" / "engine.log"
        configure_logging(level="INFO", json_format=True, log_file=log_file, console_output=False)

        logger = structlog.get_logger("task_engine.test")
        with LogContext(item_number=7):
            logger.info("decomposition_started", template="Bug Fix")
        logger.info("outside_context")

        lines = [json.loads(line) for line in log_file.read_text().splitlines()]
        assert lines[0]["event"] == "decomposition_started"
        assert lines[0]["item_number"] == 7
        assert lines[0]["template"] == "Bug Fix"
        assert lines[0]["level"] == "info"
        assert "item_number" not in lines[1]

    def test_level_filtering(self, tmp_path, reset_logging):
        """Test that events below the level are dropped."""
        log_file = tmp_path / "engine.log"
        configure_logging(level="WARNING", log_file=log_file, console_output=False)

        logger = structlog.get_logger("task_engine.test")
        logger.info("ignored")
        logger.warning("kept")

        content = log_file.read_text()
        assert "ignored" not in content
        assert "kept" in content

    def test_configure_from_config(self, tmp_path, reset_logging):
        """Test configuration from a LoggingConfig section."""
        log_file = tmp_path / "engine.log"
        config = LoggingConfig(level=LogLevel.DEBUG, format="text", file=str(log_file), console=False)
        configure_from_config(config)

        structlog.get_logger("task_engine.test").debug("debug_event", count=2)

        assert "debug_event" in log_file.read_text()
