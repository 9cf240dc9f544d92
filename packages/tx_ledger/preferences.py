"""Per-user notification preference storage.

Callers own the transaction scope: every function takes an active session and
never commits.
"""

from __future__ import annotations

from collections.abc import Iterable

from db.models.ledger import NotificationPreference
from sqlalchemy import select
from sqlalchemy.orm import Session

from .errors import InvalidCategory
from .models import Identity, NotificationCategory, coerce_member


def validate_categories(categories: Iterable[object]) -> list[NotificationCategory]:
    """Check the whole batch up front; the first invalid element rejects it."""

    return [coerce_member(NotificationCategory, c, InvalidCategory) for c in categories]


def write_preferences(
    session: Session,
    user: Identity,
    categories: Iterable[NotificationCategory],
    enabled: bool,
) -> None:
    """Upsert ``(user, category) -> enabled`` for each distinct category."""

    for category in dict.fromkeys(categories):
        row = session.get(NotificationPreference, (user, int(category)))
        if row is None:
            session.add(NotificationPreference(user=user, category=int(category), enabled=enabled))
        else:
            row.enabled = enabled


def enabled_categories(session: Session, user: Identity) -> list[NotificationCategory]:
    """Return enabled categories in declaration order (All, Deposits, ...)."""

    rows = session.execute(
        select(NotificationPreference.category).where(
            NotificationPreference.user == user,
            NotificationPreference.enabled.is_(True),
        )
    ).scalars()
    on = set(rows)
    return [c for c in NotificationCategory if int(c) in on]


__all__ = [
    "validate_categories",
    "write_preferences",
    "enabled_categories",
]
