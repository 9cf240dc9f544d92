"""Shared SQLAlchemy models registry for the ledger database.

Currently includes the ledger domain models used by ``tx_ledger``.
"""

from .ledger import (
    AuditEvent,
    Base,
    BigUInt,
    InteractionCount,
    LedgerCounter,
    LedgerTransaction,
    LedgerUserIndex,
    NotificationPreference,
)

__all__ = [
    "Base",
    "BigUInt",
    "LedgerTransaction",
    "LedgerUserIndex",
    "LedgerCounter",
    "NotificationPreference",
    "AuditEvent",
    "InteractionCount",
]
