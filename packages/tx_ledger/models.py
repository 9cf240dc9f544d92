"""Domain types for ``tx_ledger``.

Enumerations are ``IntEnum`` with values starting at 1 so that ``0`` stays
free to mean "no filter" in history queries. Identities, transaction ids and
amounts are plain unsigned integers (up to 256 bits).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TypeAlias, TypeVar

from .errors import LedgerError

Identity: TypeAlias = int
"""Opaque account identity. ``0`` is never a valid caller or admin."""

TxId: TypeAlias = int
"""Caller-supplied transaction fingerprint; must be non-zero."""

NO_FILTER = 0

UINT_BITS = 256

# Action id under which the ledger reports recorded transactions to the
# interaction counter collaborator.
ACTION_RECORD_TRANSACTION = 1


class TransactionType(IntEnum):
    DEPOSIT = 1
    WITHDRAWAL = 2
    SWAP = 3
    TRANSFER = 4
    OTHER = 5


class TransactionStatus(IntEnum):
    PENDING = 1
    COMPLETED = 2
    FAILED = 3
    CANCELLED = 4


class NotificationCategory(IntEnum):
    """Notification classes a user can toggle.

    Declaration order is the fixed order in which enabled categories are
    reported back, independent of the order they were set in.
    """

    ALL = 1
    DEPOSITS = 2
    WITHDRAWALS = 3
    STATUS_CHANGES = 4


@dataclass(frozen=True, slots=True)
class Transaction:
    """A recorded action as returned to readers.

    Every field except ``status`` is fixed at creation.
    """

    id: TxId
    owner: Identity
    type: TransactionType
    amount: int
    timestamp: int
    status: TransactionStatus
    description: str | None = None


def is_uint(value: object) -> bool:
    """True for a non-bool ``int`` in ``[0, 2**UINT_BITS)``."""

    return (
        not isinstance(value, bool)
        and isinstance(value, int)
        and value >= 0
        and value.bit_length() <= UINT_BITS
    )


E = TypeVar("E", bound=IntEnum)


def coerce_member(enum_cls: type[E], value: object, error: type[LedgerError]) -> E:
    """Return ``value`` as a member of ``enum_cls`` or raise ``error``.

    Accepts enum members and plain integers; booleans and anything else are
    rejected even when they would compare equal to a member.
    """

    if isinstance(value, bool) or not isinstance(value, int):
        raise error(f"{value!r} is not a valid {enum_cls.__name__}")
    try:
        return enum_cls(value)
    except ValueError:
        raise error(f"{value!r} is not a valid {enum_cls.__name__}") from None


__all__ = [
    "Identity",
    "TxId",
    "NO_FILTER",
    "UINT_BITS",
    "ACTION_RECORD_TRANSACTION",
    "TransactionType",
    "TransactionStatus",
    "NotificationCategory",
    "Transaction",
    "is_uint",
    "coerce_member",
]
