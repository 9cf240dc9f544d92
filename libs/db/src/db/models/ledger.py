from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    SmallInteger,
    String,
    Text,
)
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

# 2**256 - 1 has 78 decimal digits.
UINT_DIGITS = 78


class BigUInt(TypeDecorator[int]):
    """Unsigned integer of up to 256 bits stored as zero-padded decimal text.

    Identities, transaction fingerprints and amounts routinely exceed the
    64-bit range of native integer columns. Padding to a fixed width keeps
    lexicographic and numeric ordering identical on every backend.
    """

    impl = String(UINT_DIGITS)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Dialect) -> str | None:
        if value is None:
            return None
        n = int(value)
        if n < 0 or n.bit_length() > 256:
            raise ValueError(f"value out of unsigned 256-bit range: {value!r}")
        return str(n).zfill(UINT_DIGITS)

    def process_result_value(self, value: Any, dialect: Dialect) -> int | None:
        if value is None:
            return None
        return int(value)


class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime:
    return datetime.now(UTC)


# ---------------------------
# Core: ledger_transactions
# ---------------------------


class LedgerTransaction(Base):
    __tablename__ = "ledger_transactions"

    # Caller-supplied fingerprint; never generated here.
    id: Mapped[int] = mapped_column(BigUInt(), primary_key=True, autoincrement=False)
    owner: Mapped[int] = mapped_column(BigUInt(), nullable=False, index=True)
    tx_type: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    amount: Mapped[int] = mapped_column(BigUInt(), nullable=False)
    # Seconds since the Unix epoch, read from the ledger clock at creation.
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("tx_type BETWEEN 1 AND 5", name="ck_ledger_tx_type"),
        CheckConstraint("status BETWEEN 1 AND 4", name="ck_ledger_tx_status"),
    )


# ---------------------------
# Per-user history index
# ---------------------------


class LedgerUserIndex(Base):
    """Append-only ``(user, position) -> tx_id`` rows; positions are dense from 0."""

    __tablename__ = "ledger_user_index"

    user: Mapped[int] = mapped_column(BigUInt(), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    tx_id: Mapped[int] = mapped_column(
        BigUInt(), ForeignKey("ledger_transactions.id"), nullable=False, unique=True
    )


class LedgerCounter(Base):
    __tablename__ = "ledger_counters"

    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)


# ---------------------------
# Notification preferences
# ---------------------------


class NotificationPreference(Base):
    __tablename__ = "notification_preferences"

    user: Mapped[int] = mapped_column(BigUInt(), primary_key=True)
    category: Mapped[int] = mapped_column(SmallInteger, primary_key=True, autoincrement=False)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False)

    __table_args__ = (
        CheckConstraint("category BETWEEN 1 AND 4", name="ck_notification_pref_category"),
    )


# ---------------------------
# Audit log
# ---------------------------


class AuditEvent(Base):
    __tablename__ = "audit_events"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    kind: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )


# ---------------------------
# Interaction counter (collaborator)
# ---------------------------


class InteractionCount(Base):
    __tablename__ = "interaction_counts"

    user: Mapped[int] = mapped_column(BigUInt(), primary_key=True)
    action_id: Mapped[int] = mapped_column(BigUInt(), primary_key=True)
    count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)


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
