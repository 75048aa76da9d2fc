"""Tests for logging setup."""

import io
import logging

from flipbudget.logging_config import configure_logging, get_logger


def test_loggers_share_namespace():
    assert get_logger("budget").name == "flipbudget.budget"


def test_configure_logging_writes_to_stream():
    stream = io.StringIO()
    configure_logging("info", stream=stream)

    get_logger("draw").info("Draw %s is now %s", 4, "paid")

    assert "INFO flipbudget.draw: Draw 4 is now paid" in stream.getvalue()


def test_configure_logging_is_idempotent():
    stream = io.StringIO()
    configure_logging(logging.WARNING, stream=stream)
    configure_logging(logging.DEBUG, stream=stream)

    root = logging.getLogger("flipbudget")
    assert len(root.handlers) == 1
    assert root.level == logging.DEBUG

    get_logger("autosave").debug("Saved document 1")
    assert stream.getvalue().count("Saved document 1") == 1
