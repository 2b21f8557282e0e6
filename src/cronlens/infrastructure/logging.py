"""Logging setup for CronLens.

Library modules log through ``logging.getLogger(__name__)`` and never
configure handlers themselves. Applications (and the CLI) call
``configure_logging`` once to route the ``cronlens`` logger to a stream as
plain text or JSON lines.

Usage:
    >>> from cronlens.infrastructure.logging import configure_logging
    >>> configure_logging("debug", format="json")
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, TextIO

ROOT_LOGGER = "cronlens"

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_handler: logging.Handler | None = None


class LogLevel(IntEnum):
    """Log severity levels."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @classmethod
    def from_string(cls, level: str) -> "LogLevel":
        """Convert string to LogLevel (unknown names map to INFO)."""
        mapping = {
            "debug": cls.DEBUG,
            "info": cls.INFO,
            "warning": cls.WARNING,
            "warn": cls.WARNING,
            "error": cls.ERROR,
            "critical": cls.CRITICAL,
            "fatal": cls.CRITICAL,
        }
        return mapping.get(level.lower(), cls.INFO)


class JSONFormatter(logging.Formatter):
    """Format records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


def configure_logging(
    level: str | int = "WARNING",
    *,
    format: str = "text",
    stream: TextIO | None = None,
) -> logging.Logger:
    """Install a single handler on the ``cronlens`` logger.

    Calling again replaces the previous handler.

    Args:
        level: Level name or number.
        format: ``text`` or ``json``.
        stream: Output stream (default: stderr).

    Returns:
        The configured ``cronlens`` logger.
    """
    global _handler

    if isinstance(level, str):
        level = LogLevel.from_string(level)
    if format not in ("text", "json"):
        raise ValueError(f"Unknown log format: {format}")

    logger = logging.getLogger(ROOT_LOGGER)
    if _handler is not None:
        logger.removeHandler(_handler)

    _handler = logging.StreamHandler(stream or sys.stderr)
    if format == "json":
        _handler.setFormatter(JSONFormatter())
    else:
        _handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    logger.addHandler(_handler)
    logger.setLevel(int(level))
    logger.propagate = False
    return logger


def reset_logging() -> None:
    """Remove the handler installed by ``configure_logging``."""
    global _handler

    logger = logging.getLogger(ROOT_LOGGER)
    if _handler is not None:
        logger.removeHandler(_handler)
        _handler = None
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
