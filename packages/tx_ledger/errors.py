"""Ledger error kinds.

Every rejected operation raises exactly one of these before anything is
committed. ``code`` is a stable, machine-readable name that the CLI prints and
callers may switch on.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for all domain-level rejections."""

    code: str = "LedgerError"


class InvalidIdentifier(LedgerError):
    code = "InvalidIdentifier"


class InvalidType(LedgerError):
    code = "InvalidType"


class InvalidStatus(LedgerError):
    code = "InvalidStatus"


class InvalidCategory(LedgerError):
    code = "InvalidCategory"


class InvalidAmount(LedgerError):
    code = "InvalidAmount"


class DuplicateTransaction(LedgerError):
    code = "DuplicateTransaction"


class NotFound(LedgerError):
    code = "NotFound"


class PermissionDenied(LedgerError):
    code = "PermissionDenied"


__all__ = [
    "LedgerError",
    "InvalidIdentifier",
    "InvalidType",
    "InvalidStatus",
    "InvalidCategory",
    "InvalidAmount",
    "DuplicateTransaction",
    "NotFound",
    "PermissionDenied",
]
