"""
Logging helpers.

The library only attaches a NullHandler; applications (or the CLI) call
``setup_logging`` to get console or JSON output.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from rich.console import Console
from rich.logging import RichHandler

from maasapi.config import get_settings

ROOT_LOGGER = "maasapi"

logging.getLogger(ROOT_LOGGER).addHandler(logging.NullHandler())


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ``maasapi`` namespace."""
    if name != ROOT_LOGGER and not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def setup_logging(
    level: str | None = None,
    json_output: bool | None = None,
) -> logging.Logger:
    """
    Configure the ``maasapi`` logger.

    Args:
        level: Log level name (defaults to settings.log_level)
        json_output: Emit JSON lines instead of rich console output
            (defaults to settings.log_json)

    Returns:
        The configured root ``maasapi`` logger
    """
    settings = get_settings()
    level = level or settings.log_level
    if json_output is None:
        json_output = settings.log_json

    if json_output:
        handler: logging.Handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
    else:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )

    logger = logging.getLogger(ROOT_LOGGER)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


__all__ = ["get_logger", "setup_logging", "JSONFormatter"]
