"""Application logging setup (single entry point).

The module wraps the standard :mod:`logging` configuration so the rest of
the code never repeats format, level or handler setup.
"""

from __future__ import annotations

import logging
import sys
from logging import Logger, StreamHandler
from typing import Dict, Final

LOG_FORMAT: Final[str] = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

LOG_LEVELS: Final[Dict[str, int]] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

ROOT_LOGGER_NAME: Final[str] = "budget_dashboard"


def resolve_level(level: str | int | None) -> int:
    """Map a level name (any case) or number to a :mod:`logging` level.

    Unknown names fall back to ``INFO``.
    """
    if isinstance(level, int):
        return level
    if not level:
        return logging.INFO
    return LOG_LEVELS.get(str(level).upper(), logging.INFO)


def setup_logging(level: str | int | None = None) -> Logger:
    """Configure logging for the application and return the package logger.

    Parameters
    ----------
    level : str or int, optional
        ``"DEBUG"``, ``"INFO"``, ``"WARNING"``, ``"ERROR"`` or
        ``"CRITICAL"`` (lower case accepted).  Defaults to the configured
        ``BUDGET_DASHBOARD_LOG_LEVEL``.

    Returns
    -------
    logging.Logger
        The ``budget_dashboard`` logger.
    """
    if level is None:
        from .config import LOG_LEVEL

        level = LOG_LEVEL

    logging.basicConfig(
        level=resolve_level(level),
        format=LOG_FORMAT,
        handlers=[StreamHandler(sys.stdout)],
        force=True,
    )
    return logging.getLogger(ROOT_LOGGER_NAME)


def get_logger(name: str = ROOT_LOGGER_NAME) -> Logger:
    """Return a named logger; modules pass ``__name__``."""
    return logging.getLogger(name)
