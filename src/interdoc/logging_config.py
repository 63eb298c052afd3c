"""Logging setup for the interdoc CLI and embedding applications.

Library modules only call ``logging.getLogger(__name__)``; nothing is
configured until an application calls :func:`configure_logging`.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Literal

from rich.logging import RichHandler

ROOT_LOGGER = "interdoc"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def resolve_level(level: str) -> int:
    try:
        return _LEVELS[level.lower()]
    except KeyError:
        raise ValueError(f"Unknown log level: {level!r}") from None


def configure_logging(
    level: str = "info",
    fmt: Literal["text", "json"] = "text",
    stream=None,
) -> logging.Logger:
    """Attach a single handler to the ``interdoc`` logger.

    Calling it again replaces the previous handler, so the CLI callback can
    run more than once in a process (as it does under test).
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, "_interdoc", False):
            logger.removeHandler(handler)

    if fmt == "json":
        handler: logging.Handler = logging.StreamHandler(stream)
        handler.setFormatter(JsonLineFormatter())
    elif stream is not None:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter("%(levelname)-8s [%(name)s] %(message)s"))
    else:
        handler = RichHandler(show_path=False, rich_tracebacks=True)
    handler._interdoc = True  # type: ignore[attr-defined]

    logger.addHandler(handler)
    logger.setLevel(resolve_level(level))
    return logger
