"""Logging utilities for qregister.

Loggers are namespaced under ``qregister.`` and write to stderr. They do not
propagate to the root logger, so host applications keep control of their own
logging tree.

The register engine logs construction, operator placement and measurement
outcomes at DEBUG, and dense expansions of large registers at WARNING. The
starting level can be set with the ``QREGISTER_LOG_LEVEL`` environment
variable (a level name such as ``DEBUG``).
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

_LOG_LEVEL_ENV_VAR = "QREGISTER_LOG_LEVEL"
_DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

_loggers: dict[str, logging.Logger] = {}


def _coerce_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.strip().upper(), logging.WARNING)
    return level


_DEFAULT_LEVEL = _coerce_level(os.getenv(_LOG_LEVEL_ENV_VAR, "WARNING"))


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get or create a logger for the given module name.

    Loggers are cached to avoid duplicate handlers. The name is usually
    ``__name__`` of the calling module.

    Args:
        name: Logger name. If None, returns the package logger.

    Returns:
        Configured logger instance.

    Example:
        >>> from qregister.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.debug("collapsed to %s", "01")
    """
    if name is None:
        name = "qregister"

    logger_name = name if name.startswith("qregister") else f"qregister.{name}"

    if logger_name in _loggers:
        return _loggers[logger_name]

    logger = logging.getLogger(logger_name)

    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(_DEFAULT_LEVEL)
        handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    _loggers[logger_name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """Set the level of every qregister logger, existing and future.

    Args:
        level: ``logging.DEBUG`` etc., or a level name such as ``"DEBUG"``.
    """
    global _DEFAULT_LEVEL
    level = _coerce_level(level)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)

    _DEFAULT_LEVEL = level


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[object] = None,
) -> None:
    """Reconfigure handlers of all qregister loggers.

    Args:
        level: Logging level (default: WARNING).
        format_string: Custom format string. If None, uses the default.
        stream: Output stream (default: sys.stderr).
    """
    global _DEFAULT_LEVEL
    level = _coerce_level(level)

    if stream is None:
        stream = sys.stderr
    formatter = logging.Formatter(format_string or _DEFAULT_FORMAT)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        handler = logging.StreamHandler(stream)
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    _DEFAULT_LEVEL = level
