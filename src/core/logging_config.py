"""Structured logging configuration.

This module initializes loggers that render JSON events to stderr,
keeping stdout free for command output. It prefers structlog and
falls back to standard logging if absent.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

from core.constants import SUPPORTED_LOG_LEVELS

_state: dict[str, int] = {"level": logging.INFO}


def configure_logging(level: str) -> None:
    """Set the minimum level for all Tabload loggers.

    Args:
        level: Level name such as ``info`` or ``debug``.

    Raises:
        ValueError: If the level name is unknown.
    """
    normalized = level.lower()
    if normalized not in SUPPORTED_LOG_LEVELS:
        raise ValueError(f"Unknown log level '{level}'. Expected one of {SUPPORTED_LOG_LEVELS}.")
    _state["level"] = getattr(logging, normalized.upper())
    try:
        import structlog
    except ImportError:
        for logger in logging.Logger.manager.loggerDict.values():
            if isinstance(logger, logging.Logger):
                logger.setLevel(_state["level"])
        return
    _configure_structlog(structlog)


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog or stdlib logger with structured output.
    """
    try:
        import structlog
    except ImportError:
        return _get_standard_logger(name)

    _configure_structlog(structlog)
    return structlog.get_logger(name)


def _configure_structlog(structlog: Any) -> None:
    """Apply the JSON-to-stderr pipeline at the current level.

    Loggers are not cached so a later level change reaches loggers
    that modules already hold.
    """
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_state["level"]),
        logger_factory=_stderr_logger_factory(structlog),
        cache_logger_on_first_use=False,
    )


def _get_standard_logger(name: str) -> Any:
    """Create a stdlib logger fallback.

    Args:
        name: Logger name.

    Returns:
        Configured standard logger.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(_state["level"])
    return _StructuredStandardLogger(logger)


class _StructuredStandardLogger:
    """Stdlib logger adapter that accepts structured keyword fields."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def debug(self, event: str, **fields: object) -> None:
        self._logger.debug(_format_event(event, fields))

    def info(self, event: str, **fields: object) -> None:
        self._logger.info(_format_event(event, fields))

    def warning(self, event: str, **fields: object) -> None:
        self._logger.warning(_format_event(event, fields))

    def error(self, event: str, **fields: object) -> None:
        self._logger.error(_format_event(event, fields))


def _format_event(event: str, fields: dict[str, object]) -> str:
    """Render a structured event as one JSON line."""
    if not fields:
        return event
    payload = {"event": event, **fields}
    return json.dumps(payload, sort_keys=True, default=str)


def _stderr_logger_factory(structlog: Any) -> Any:
    """Build a factory that resolves ``sys.stderr`` on every logger creation."""

    def factory(*_args: object) -> Any:
        return structlog.PrintLogger(file=sys.stderr)

    return factory
