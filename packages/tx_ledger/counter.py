"""Per-(user, action) interaction counter.

The ledger treats this as an external collaborator: it only calls
``increment`` when a transaction is recorded and ``read`` on behalf of
callers. ``SqlInteractionCounter`` keeps the counts in the ledger database;
when handed the ledger's session it joins that transaction instead of opening
its own.
"""

from __future__ import annotations

from typing import Protocol

from db.client import session_scope
from db.models.ledger import InteractionCount
from sqlalchemy.orm import Session

from .models import Identity


class InteractionCounter(Protocol):
    def increment(self, user: Identity, action_id: int, *, session: Session | None = None) -> int: ...

    def read(self, user: Identity, action_id: int, *, session: Session | None = None) -> int: ...


class SqlInteractionCounter:
    def __init__(self, *, database_url: str | None = None) -> None:
        self._database_url = database_url

    def increment(self, user: Identity, action_id: int, *, session: Session | None = None) -> int:
        """Add one to ``(user, action_id)`` and return the new count."""

        if session is None:
            with session_scope(database_url=self._database_url) as own:
                return self.increment(user, action_id, session=own)

        row = session.get(InteractionCount, (user, action_id))
        if row is None:
            row = InteractionCount(user=user, action_id=action_id, count=0)
            session.add(row)
        row.count += 1
        return row.count

    def read(self, user: Identity, action_id: int, *, session: Session | None = None) -> int:
        if session is None:
            with session_scope(database_url=self._database_url) as own:
                return self.read(user, action_id, session=own)

        row = session.get(InteractionCount, (user, action_id))
        return 0 if row is None else row.count


__all__ = [
    "InteractionCounter",
    "SqlInteractionCounter",
]
