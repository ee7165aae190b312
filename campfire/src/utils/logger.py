"""
Campfire - Logging
===================
Pre-configured logger factory for consistent log output across all
Campfire modules.

Verbosity follows ``settings.ENV``:
  • ``"dev"``  → DEBUG level
  • ``"prod"`` → WARNING level

Usage:
    from campfire.src.utils.logger import get_logger
    logger = get_logger(__name__)
    logger.info("[INDEX] Upserted %d products", count)
"""

import logging
import sys

from campfire.config.settings import settings

_ENV_LEVEL_MAP = {
    "dev": logging.DEBUG,
    "prod": logging.WARNING,
}
_DEFAULT_LEVEL = _ENV_LEVEL_MAP.get(settings.ENV, logging.INFO)

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """
    Return a named logger writing to stdout.

    Args:
        name:  Typically ``__name__`` of the calling module.
        level: Explicit level override.  Defaults to the ``settings.ENV`` level.
    """
    resolved_level = level if level is not None else _DEFAULT_LEVEL
    logger = logging.getLogger(name)

    # Handlers are attached once per logger name
    if not logger.handlers:
        logger.setLevel(resolved_level)

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(resolved_level)
        handler.setFormatter(logging.Formatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT))
        logger.addHandler(handler)

        # Prevent log propagation to the root logger (avoids duplicates)
        logger.propagate = False

    return logger
