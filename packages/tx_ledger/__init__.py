"""Public interface for the ``tx_ledger`` package.

This module exposes the ledger service, its collaborator interfaces, domain
types and error kinds as the stable import surface. There is no runtime logic
here, only symbol re-exports.
"""

from .access import AccessControl, AdminAccessControl, IdentityContext, StaticIdentity
from .audit import (
    AuditEventLog,
    LedgerEvent,
    LoggedEvent,
    NotificationPreferencesSet,
    TransactionRecorded,
    TransactionStatusUpdated,
)
from .counter import InteractionCounter, SqlInteractionCounter
from .errors import (
    DuplicateTransaction,
    InvalidAmount,
    InvalidCategory,
    InvalidIdentifier,
    InvalidStatus,
    InvalidType,
    LedgerError,
    NotFound,
    PermissionDenied,
)
from .ledger import TransactionLedger
from .models import (
    NO_FILTER,
    Identity,
    NotificationCategory,
    Transaction,
    TransactionStatus,
    TransactionType,
    TxId,
)

__all__ = [
    # Service
    "TransactionLedger",
    # Collaborators
    "IdentityContext",
    "AccessControl",
    "AdminAccessControl",
    "StaticIdentity",
    "InteractionCounter",
    "SqlInteractionCounter",
    # Audit
    "AuditEventLog",
    "LedgerEvent",
    "LoggedEvent",
    "TransactionRecorded",
    "TransactionStatusUpdated",
    "NotificationPreferencesSet",
    # Models / types
    "Identity",
    "TxId",
    "NO_FILTER",
    "Transaction",
    "TransactionType",
    "TransactionStatus",
    "NotificationCategory",
    # Errors
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
