"""
Structured Logging Configuration for the task engine

Provides JSON or console formatted, contextual logging with
work-item tracking and log rotation.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, List, Optional, Union

import structlog

from .config_loader import LoggingConfig


def configure_logging(
    level: Union[str, int] = "INFO",
    json_format: bool = True,
    log_file: Optional[Union[str, Path]] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    console_output: bool = True,
    additional_processors: Optional[List] = None
) -> structlog.BoundLogger:
    """
    Configure structured logging for the task engine.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: Use JSON formatting
        log_file: Path to log file (optional)
        max_bytes: Maximum log file size before rotation
        backup_count: Number of backup files to keep
        console_output: Enable console output
        additional_processors: Additional structlog processors

    Returns:
        Configured structlog logger

    Example:
        >>> logger = configure_logging(level="DEBUG", json_format=False)
        >>> logger.info("recommendation_pass_started", items=12)
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: List = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if additional_processors:
        shared_processors.extend(additional_processors)

    if json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False, pad_event=False)

    # Route structlog through stdlib so the handlers below receive every event
    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    handlers: List[logging.Handler] = []

    if console_output:
        # stderr keeps rendered reports on stdout clean
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        handlers.append(logging.NullHandler())

    logging.basicConfig(level=level, handlers=handlers, force=True)

    return structlog.get_logger("task_engine")


def configure_from_config(config: LoggingConfig) -> structlog.BoundLogger:
    """
    Configure logging from a validated LoggingConfig.

    Args:
        config: Logging section of the engine configuration

    Returns:
        Configured structlog logger
    """
    return configure_logging(
        level=config.level.value,
        json_format=config.format == "json",
        log_file=config.file,
        max_bytes=config.max_size_mb * 1024 * 1024,
        backup_count=config.backup_count,
        console_output=config.console,
    )


class LogContext:
    """
    Context manager for adding contextual data to logs.

    Example:
        >>> with LogContext(item_number=42):
        ...     logger.info("decomposition_started")
        # Output includes item_number
    """

    def __init__(self, **context: Any):
        """
        Initialize context with key-value pairs.

        Args:
            **context: Context key-value pairs to add to logs
        """
        self.context = context

    def __enter__(self) -> LogContext:
        """Enter context and bind variables."""
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context and unbind variables."""
        structlog.contextvars.unbind_contextvars(*self.context.keys())
