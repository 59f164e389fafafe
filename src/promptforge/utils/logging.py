"""
Logging setup for PromptForge.

All log output goes to stderr; stdout is reserved for command output so the
CLI can be piped (for example ``promptforge render ... > prompt.txt``).
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Literal

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def resolve_level(level: str | int) -> int:
    """Map a level name ("debug", "INFO", ...) or number to a logging level."""
    if isinstance(level, int):
        return level
    try:
        return _LEVELS[level.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown log level: {level}") from None


def setup_logging(
    level: str | int = "info",
    fmt: Literal["text", "json"] = "text",
) -> logging.Handler:
    """
    Configure root logging with a single stderr handler.

    Calling this again replaces the handler installed by the previous call.

    Args:
        level: Log level name or number
        fmt: "text" for the human-readable format, "json" for one object per line

    Returns:
        The installed handler
    """
    handler = logging.StreamHandler(sys.stderr)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    logging.basicConfig(level=resolve_level(level), handlers=[handler], force=True)
    return handler
