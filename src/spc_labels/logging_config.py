"""Logging setup for the command line.

Library modules only call ``logging.getLogger(__name__)``; handlers are
configured here, once, by the CLI. The level comes from ``--log-level``,
then the ``LOG_LEVEL`` environment variable, then WARNING.
"""

from __future__ import annotations

__all__ = ["VALID_LOG_LEVELS", "configure_logging", "resolve_log_level"]

import logging
import os

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]
DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVEL_ENV_VAR = "LOG_LEVEL"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def resolve_log_level(level: str | None = None) -> str:
    """Pick the effective level name; unknown names fall back to the default."""
    candidate = level or os.environ.get(LOG_LEVEL_ENV_VAR) or DEFAULT_LOG_LEVEL
    candidate = candidate.upper()
    if candidate not in VALID_LOG_LEVELS:
        return DEFAULT_LOG_LEVEL
    return candidate


def configure_logging(level: str | None = None) -> str:
    """Configure the ``spc_labels`` logger and return the level used."""
    name = resolve_log_level(level)
    logger = logging.getLogger("spc_labels")
    logger.setLevel(getattr(logging, name))
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return name
