"""Logging setup for flipbudget."""

import logging
import sys
from typing import Any

_LOGGER_PREFIX = "flipbudget"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured = False


class _StderrHandler(logging.StreamHandler):
    """Stream handler that writes to sys.stderr as it is at emit time."""

    def __init__(self):
        super().__init__(sys.stderr)

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        pass


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the flipbudget namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


def configure_logging(
    level: int | str = logging.WARNING,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Configure the flipbudget logger hierarchy (idempotent)."""
    global _configured
    root_logger = logging.getLogger(_LOGGER_PREFIX)
    if isinstance(level, str):
        level = level.upper()
    root_logger.setLevel(level)
    if _configured:
        return
    _configured = True

    if handler is not None:
        h = handler
    elif stream is not None:
        h = logging.StreamHandler(stream)
    else:
        h = _StderrHandler()
    h.setFormatter(logging.Formatter(_FORMAT))
    root_logger.addHandler(h)
    root_logger.propagate = False


def reset_logging() -> None:
    """Reset logging configuration. For tests."""
    global _configured
    _configured = False
    logger = logging.getLogger(_LOGGER_PREFIX)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
