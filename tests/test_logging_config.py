"""Tests for interdoc.logging_config."""

from __future__ import annotations

import io
import json
import logging

import pytest
from rich.logging import RichHandler

from interdoc.logging_config import ROOT_LOGGER, configure_logging, resolve_level


@pytest.fixture(autouse=True)
def restore_logger():
    logger = logging.getLogger(ROOT_LOGGER)
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


@pytest.mark.parametrize(
    "name, level",
    [("debug", logging.DEBUG), ("info", logging.INFO), ("warn", logging.WARNING), ("ERROR", logging.ERROR)],
)
def test_resolve_level(name, level):
    assert resolve_level(name) == level


def test_resolve_level_unknown():
    with pytest.raises(ValueError, match="Unknown log level"):
        resolve_level("loud")


def test_json_lines():
    stream = io.StringIO()
    configure_logging("info", "json", stream=stream)
    logging.getLogger("interdoc.converter").info("Converted %s", "a.txt")
    entry = json.loads(stream.getvalue().splitlines()[-1])
    assert entry["level"] == "info"
    assert entry["logger"] == "interdoc.converter"
    assert entry["message"] == "Converted a.txt"


def test_json_includes_exception():
    stream = io.StringIO()
    configure_logging("info", "json", stream=stream)
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        logging.getLogger("interdoc").warning("failed", exc_info=True)
    entry = json.loads(stream.getvalue().splitlines()[-1])
    assert "RuntimeError: boom" in entry["exc"]


def test_level_filters():
    stream = io.StringIO()
    configure_logging("warn", "text", stream=stream)
    log = logging.getLogger("interdoc.registry")
    log.info("hidden")
    log.warning("shown")
    assert "hidden" not in stream.getvalue()
    assert "WARNING  [interdoc.registry] shown" in stream.getvalue()


def test_reconfigure_replaces_handler():
    configure_logging("info", "json", stream=io.StringIO())
    configure_logging("debug", "json", stream=io.StringIO())
    ours = [h for h in logging.getLogger(ROOT_LOGGER).handlers if getattr(h, "_interdoc", False)]
    assert len(ours) == 1


def test_rich_handler_by_default():
    logger = configure_logging("info", "text")
    assert any(isinstance(h, RichHandler) for h in logger.handlers)
