"""Logging for the ``tx_ledger`` package.

Library modules call ``get_logger("tx_ledger.<module>")`` and never attach
handlers. Entry points (the CLI) call ``configure_logging`` once to send the
package's records to a single stream handler. ``reset_logging`` undoes that so
a host or test can hand the package back to the root logger.

Audit events, not log records, are the ledger's consumer-facing channel; logs
here are operational diagnostics only (rejections at WARNING, accepted
mutations at INFO, history windows at DEBUG).
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "tx_ledger"
_LEVEL_ENV = "TX_LEDGER_LOG_LEVEL"
_DEFAULT_FMT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_handler: logging.Handler | None = None


def _parse_level(level: int | str | None) -> int:
    if level is None:
        level = os.getenv(_LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelNamesMapping().get(name)
    return numeric if numeric is not None else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> logging.Logger:
    """Attach one stream handler to the ``tx_ledger`` logger; idempotent.

    ``level`` accepts an int, a level name or a numeric string. When ``None``
    the ``TX_LEDGER_LOG_LEVEL`` environment variable is consulted, then INFO.
    Unknown names fall back to INFO.
    """

    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is not None:
        return logger

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FMT))
    logger.setLevel(resolved)
    logger.addHandler(handler)
    # Avoid double emission via the root logger.
    logger.propagate = False
    _handler = handler
    return logger


def reset_logging() -> None:
    """Remove the handler installed by ``configure_logging`` and re-enable propagation."""

    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is not None:
        logger.removeHandler(_handler)
        _handler = None
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def get_logger(name: str) -> logging.Logger:
    """Return ``name``'s logger, giving the package a ``NullHandler`` until configured."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = [
    "configure_logging",
    "reset_logging",
    "get_logger",
]
