"""Logging configuration helpers for poreconcile."""

from __future__ import annotations

import logging
import sys
from typing import Final

from poreconcile.config import config

_DEFAULT_FORMAT: Final[str] = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DEFAULT_DATEFMT: Final[str] = "%Y-%m-%d %H:%M:%S"


def _resolve_level(level_name: str) -> int:
    """Translate a log level string or number into a logging level."""

    value = level_name.strip()
    if value.isdigit():
        return int(value)

    numeric = getattr(logging, value.upper(), None)
    if isinstance(numeric, int):
        return numeric

    return logging.INFO


def _configure_app_logger(level: int) -> None:
    app_logger = logging.getLogger("poreconcile")
    if not app_logger.handlers:
        # Reports go to stdout, so diagnostics stay on stderr.
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT, _DEFAULT_DATEFMT))
        app_logger.addHandler(handler)
    app_logger.setLevel(level)
    app_logger.propagate = False


def configure_logging(*, debug: bool = False) -> None:
    """Ensure the poreconcile logger streams to the console."""

    level = logging.DEBUG if debug else _resolve_level(config.LOG_LEVEL)
    _configure_app_logger(level)
