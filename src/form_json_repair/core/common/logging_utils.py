"""
Logging utilities for the application.

This module provides utilities for logging, including:
- Test/production environment tagging
- Structured loggers for the HTTP layer
- Bounded previews of operator-typed text
"""

import logging
import os
import sys
from typing import Literal

import structlog

DEFAULT_LOG_FORMAT = (
    "%(asctime)s [%(levelname)-8s] [%(env_tag)s] %(name)s:%(lineno)d %(message)s"
)

# Operator text can be several kilobytes of product copy; logs only get a slice
PREVIEW_CHARS = 80


def _is_running_under_pytest() -> bool:
    """Detect if we're running under pytest.

    Returns:
        True if running under pytest, False otherwise
    """
    return "pytest" in sys.modules or os.getenv("PYTEST_CURRENT_TEST") is not None


def _get_environment_tag() -> str:
    """Get the environment tag for logging.

    Returns:
        'test' if running under pytest, 'prod' otherwise
    """
    return "test" if _is_running_under_pytest() else "prod"


class EnvironmentTaggingFilter(logging.Filter):
    """Logging filter that adds environment tags to log records."""

    def __init__(self) -> None:
        super().__init__()
        self._env_tag = _get_environment_tag()

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        record.env_tag = self._env_tag
        return True


class EnvironmentTaggingFormatter(logging.Formatter):
    """Logging formatter that includes environment tags."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: Literal["%", "{", "$"] = "%",
    ) -> None:
        super().__init__(fmt or DEFAULT_LOG_FORMAT, datefmt, style=style)

    def format(self, record: logging.LogRecord) -> str:
        # Records emitted before the filter is installed still need the field
        if not hasattr(record, "env_tag"):
            record.env_tag = _get_environment_tag()
        return super().format(record)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger.

    Args:
        name: Optional logger name

    Returns:
        A structured logger
    """
    return structlog.get_logger(name)  # type: ignore


def preview(text: str, limit: int = PREVIEW_CHARS) -> str:
    """Return a single-line, bounded preview of operator text for log messages."""
    if not text:
        return ""
    flattened = text.replace("\r", "\\r").replace("\n", "\\n")
    if len(flattened) <= limit:
        return flattened
    return f"{flattened[:limit]}... ({len(text)} chars)"


def configure_logging_with_environment_tagging(
    level: int = logging.INFO,
    log_format: str | None = None,
    log_file: str | None = None,
) -> None:
    """Configure logging with environment tagging.

    Args:
        level: Logging level
        log_format: Optional log format string
        log_file: Optional log file path
    """
    formatter = EnvironmentTaggingFormatter(fmt=log_format)
    env_filter = EnvironmentTaggingFilter()

    handlers: list[logging.Handler] = []

    # Diagnostics and repaired text go to stdout/stderr, so logs stay on stderr
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(env_filter)
    handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        file_handler.addFilter(env_filter)
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        handlers=handlers,
        force=True,  # Override any existing configuration
    )

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
