"""Logging helpers.

Library modules only obtain loggers; applications opt in to output by calling
`configure_logging()` once.

Usage:
    from ownedstore.config import configure_logging, get_logger

    configure_logging("DEBUG")
    log = get_logger(__name__)
"""

from __future__ import annotations

import logging
import os

_DEFAULT_LEVEL = os.getenv("OWNEDSTORE_LOG_LEVEL", "WARNING").upper()
_DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"
_ROOT_LOGGER = "ownedstore"
_configured: str | int | None = None


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package namespace.

    Args:
        name: Usually the calling module's `__name__`.

    Returns:
        Standard library logger.
    """
    return logging.getLogger(name)


def configure_logging(
    level: str | int | None = None,
    fmt: str | None = None,
    datefmt: str | None = None,
) -> str | int:
    """Attach one formatted stream handler to the package logger.

    Calling again with the same level is a no-op; a different level only
    adjusts the level of the existing handler.

    Args:
        level: Logging level name or number. Defaults to OWNEDSTORE_LOG_LEVEL.
        fmt: Record format string.
        datefmt: Timestamp format string.

    Returns:
        The level that was applied.
    """
    global _configured

    if isinstance(level, str):
        level = level.upper()
    if level is None:
        level = _DEFAULT_LEVEL

    if _configured == level:
        return level

    logger = logging.getLogger(_ROOT_LOGGER)
    logger.setLevel(level)
    handler = next((h for h in logger.handlers if getattr(h, "_ownedstore", False)), None)
    if handler is None:
        handler = logging.StreamHandler()
        handler._ownedstore = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT, datefmt or _DEFAULT_DATEFMT))
    handler.setLevel(level)

    _configured = level
    return level
