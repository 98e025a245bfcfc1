"""Logging configuration for the posts manager.

Levels may be given by name ("DEBUG", "warning") as well as by number,
since ``Settings.logging.level`` and the ``LOG_LEVEL`` environment
variable carry names. Unknown names fall back to INFO.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: int | str) -> int:
    """Turn a level name or number into a logging level number."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(
    level: int | str = logging.INFO,
    module_name: str = "posts_manager",
) -> logging.Logger:
    """Attach a stdout handler to ``module_name`` and set its level.

    A logger that already has handlers is returned untouched, so the
    console can call this on every start without stacking output.

    Args:
        level: Level number, or a name as read from settings.
        module_name: Logger to configure.

    Returns:
        The configured logger.
    """
    logger = logging.getLogger(module_name)
    if logger.handlers:
        return logger

    numeric = resolve_level(level)
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    logger.setLevel(numeric)
    logger.addHandler(handler)
    return logger
