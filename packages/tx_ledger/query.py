"""Paginated, filtered history over the per-user transaction index.

Window semantics
----------------
For a user with ``N`` indexed transactions, page ``p`` of size ``s`` covers
positions ``[p*s, min((p+1)*s, N))``. A page that starts at or past ``N`` is
not empty: it is served as page 0, i.e. ``[0, min(s, N))``. Filters are
applied *inside* the window only; items they exclude are never backfilled
from neighbouring pages, so a page may hold fewer than ``s`` items.

Only the index rows inside the window are read, keeping a page query
proportional to ``page_size`` rather than to the user's history length.
"""

from __future__ import annotations

from db.models.ledger import LedgerTransaction, LedgerUserIndex
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .logging_setup import get_logger
from .models import NO_FILTER, Identity, Transaction, TransactionStatus, TransactionType

_logger = get_logger("tx_ledger.query")


def compute_window(total: int, page: int, page_size: int) -> tuple[int, int]:
    """Return the half-open ``(start, end)`` window for ``page``."""

    if page_size <= 0:
        raise ValueError("page_size must be a positive integer")
    if page < 0:
        raise ValueError("page must be a non-negative integer")

    start = page * page_size
    if start >= total:
        # Out-of-range pages fall back to the first page rather than empty.
        return 0, min(page_size, total)
    return start, min(start + page_size, total)


def user_index_length(session: Session, user: Identity) -> int:
    last = session.execute(
        select(func.max(LedgerUserIndex.position)).where(LedgerUserIndex.user == user)
    ).scalar_one_or_none()
    return 0 if last is None else last + 1


def row_to_transaction(row: LedgerTransaction) -> Transaction:
    return Transaction(
        id=row.id,
        owner=row.owner,
        type=TransactionType(row.tx_type),
        amount=row.amount,
        timestamp=row.timestamp,
        status=TransactionStatus(row.status),
        description=row.description,
    )


def fetch_history(
    session: Session,
    user: Identity,
    page: int,
    page_size: int,
    *,
    filter_type: int = NO_FILTER,
    filter_status: int = NO_FILTER,
) -> list[Transaction]:
    total = user_index_length(session, user)
    start, end = compute_window(total, page, page_size)
    _logger.debug(
        "history user=%s page=%s size=%s window=[%s,%s) of %s",
        user,
        page,
        page_size,
        start,
        end,
        total,
    )
    if start >= end:
        return []

    ids = list(
        session.execute(
            select(LedgerUserIndex.tx_id)
            .where(
                LedgerUserIndex.user == user,
                LedgerUserIndex.position >= start,
                LedgerUserIndex.position < end,
            )
            .order_by(LedgerUserIndex.position)
        ).scalars()
    )
    rows = session.execute(select(LedgerTransaction).where(LedgerTransaction.id.in_(ids))).scalars()
    by_id = {row.id: row for row in rows}

    out: list[Transaction] = []
    for tx_id in ids:
        row = by_id[tx_id]
        if filter_type != NO_FILTER and row.tx_type != int(filter_type):
            continue
        if filter_status != NO_FILTER and row.status != int(filter_status):
            continue
        out.append(row_to_transaction(row))
    return out


__all__ = [
    "compute_window",
    "user_index_length",
    "row_to_transaction",
    "fetch_history",
]
