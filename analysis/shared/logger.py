"""
Logging utilities for the deviation monitor.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger for a component."""
    return structlog.get_logger(name)


class AgentLogger:
    """Component logger that tags every event with the component name."""

    def __init__(self, component: str):
        self.logger = structlog.get_logger(component)
        self.component = component

    def info(self, message: str, **context: Any) -> None:
        """Log info message."""
        self.logger.info(message, component=self.component, **context)

    def warning(self, message: str, **context: Any) -> None:
        """Log warning message."""
        self.logger.warning(message, component=self.component, **context)

    def error(self, message: str, **context: Any) -> None:
        """Log error message."""
        self.logger.error(message, component=self.component, **context)

    def debug(self, message: str, **context: Any) -> None:
        """Log debug message."""
        self.logger.debug(message, component=self.component, **context)

    def exception(self, message: str, **context: Any) -> None:
        """Log exception with traceback."""
        self.logger.exception(message, component=self.component, **context)

    def bind(self, **context: Any) -> "AgentLogger":
        """Create a new logger with additional bound context."""
        new_logger = AgentLogger(self.component)
        new_logger.logger = self.logger.bind(**context)
        return new_logger


def configure_logging(
    level: str | None = None,
    json_format: bool | None = None,
) -> None:
    """
    Configure structured logging.

    Unset arguments fall back to the ``monitoring`` section of the config.
    """
    if level is None or json_format is None:
        from .config import get_config
        monitoring = get_config().monitoring
        level = level or monitoring.log_level
        json_format = monitoring.json_logs if json_format is None else json_format

    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors: list[Processor] = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Configure on import with defaults
configure_logging("INFO", json_format=False)
