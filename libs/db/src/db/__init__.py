"""db: shared database library (SQLAlchemy/Alembic) for the transaction ledger.

Public exports
--------------
- ``Base`` and ``metadata`` for Alembic autogenerate/targeting
- ORM models in ``db.models.ledger`` (re-exported for convenience)
- Engine/session helpers in ``db.client``
"""

from __future__ import annotations

from .models.ledger import (
    AuditEvent,
    Base,
    InteractionCount,
    LedgerCounter,
    LedgerTransaction,
    LedgerUserIndex,
    NotificationPreference,
)

# Re-export SQLAlchemy metadata for Alembic's env.py
metadata = Base.metadata

__all__ = [
    "Base",
    "metadata",
    "LedgerTransaction",
    "LedgerUserIndex",
    "LedgerCounter",
    "NotificationPreference",
    "AuditEvent",
    "InteractionCount",
]
