"""Logging for the ``finance_tracker`` package.

Entrypoints (``create_app`` and the CLI) call ``configure_logging`` with the
level from ``AppConfig``; modules only call ``get_logger``.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional

_PKG_LOGGER_NAME = "finance_tracker"
_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_handler: Optional[logging.Handler] = None


def configure_logging(level: str = "INFO", stream: Optional[IO[str]] = None) -> logging.Logger:
    """Send package logs at ``level`` (a name such as ``"DEBUG"``) to ``stream``.

    Calling it again replaces the handler installed by the previous call.
    Unknown level names fall back to INFO.
    """
    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is not None:
        logger.removeHandler(_handler)

    resolved = logging.getLevelName(str(level).strip().upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    _handler = logging.StreamHandler(stream or sys.stderr)
    _handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(_handler)
    logger.setLevel(resolved)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
