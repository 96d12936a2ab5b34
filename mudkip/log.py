"""Logger setup for the ``mudkip`` namespace.

Handlers always write to stderr: in the primary instance stdout carries the
JSON-lines protocol spoken with the GUI shell.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO

BASE_LOGGER_NAME = "mudkip"
LOG_LEVEL_ENV = "MUDKIP_LOG_LEVEL"
DEFAULT_LEVEL = logging.WARNING


def resolve_level(configured: object = None) -> int:
    """Pick a level from ``$MUDKIP_LOG_LEVEL``, then ``configured``, then default.

    Accepts level names (``"debug"``) or integers; anything else is ignored.
    """
    for candidate in (os.environ.get(LOG_LEVEL_ENV), configured):
        if isinstance(candidate, bool):
            continue
        if isinstance(candidate, int):
            return candidate
        if isinstance(candidate, str) and candidate.strip():
            level = logging.getLevelName(candidate.strip().upper())
            if isinstance(level, int):
                return level
    return DEFAULT_LEVEL


def setup_base_logger(*, level: int = DEFAULT_LEVEL, stream: TextIO | None = None) -> logging.Logger:
    """Configure the base ``mudkip`` logger once and return it.

    Later calls only adjust the level so tests and re-entry stay idempotent.
    """
    base = logging.getLogger(BASE_LOGGER_NAME)
    if base.handlers:
        base.setLevel(level)
        return base

    base.setLevel(level)
    base.propagate = False
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    base.addHandler(handler)
    return base


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a namespaced logger under ``mudkip``."""
    if not name or name == BASE_LOGGER_NAME:
        return logging.getLogger(BASE_LOGGER_NAME)
    if name.startswith(f"{BASE_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{BASE_LOGGER_NAME}.{name}")


__all__ = [
    "BASE_LOGGER_NAME",
    "DEFAULT_LEVEL",
    "LOG_LEVEL_ENV",
    "get_logger",
    "resolve_level",
    "setup_base_logger",
]
