"""Audit events for accepted ledger mutations.

Each accepted mutation produces one or more immutable events. Events are
written to ``audit_events`` inside the mutating call's session, so a rolled
back call leaves no trace, and are delivered to in-process subscribers only
after the call has committed.

Public surface:
- ``TransactionRecorded``, ``TransactionStatusUpdated``,
  ``NotificationPreferencesSet``: frozen pydantic models with a ``kind``
  discriminator.
- ``AuditEventLog``: persistence, subscription and read-back of events.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Literal, TypeAlias

from db.models.ledger import AuditEvent
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from sqlalchemy import select
from sqlalchemy.orm import Session

from .logging_setup import get_logger
from .models import NotificationCategory, TransactionStatus, TransactionType

_logger = get_logger("tx_ledger.audit")


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class TransactionRecorded(_Event):
    kind: Literal["TransactionRecorded"] = "TransactionRecorded"
    id: int
    user: int
    type: TransactionType
    amount: int
    timestamp: int


class TransactionStatusUpdated(_Event):
    kind: Literal["TransactionStatusUpdated"] = "TransactionStatusUpdated"
    id: int
    old_status: TransactionStatus
    new_status: TransactionStatus
    timestamp: int


class NotificationPreferencesSet(_Event):
    kind: Literal["NotificationPreferencesSet"] = "NotificationPreferencesSet"
    user: int
    category: NotificationCategory
    enabled: bool


LedgerEvent = Annotated[
    TransactionRecorded | TransactionStatusUpdated | NotificationPreferencesSet,
    Field(discriminator="kind"),
]

EVENT_KINDS: tuple[str, ...] = (
    "TransactionRecorded",
    "TransactionStatusUpdated",
    "NotificationPreferencesSet",
)

_EVENT_ADAPTER: TypeAdapter[LedgerEvent] = TypeAdapter(LedgerEvent)

Subscriber: TypeAlias = Callable[[LedgerEvent], None]


@dataclass(frozen=True, slots=True)
class LoggedEvent:
    """A persisted event together with its position in the log."""

    seq: int
    recorded_at: datetime
    event: LedgerEvent


class AuditEventLog:
    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` for committed events; returns an unsubscribe function."""

        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def record(self, session: Session, event: LedgerEvent) -> None:
        """Append ``event`` to the log within the caller's transaction."""

        session.add(AuditEvent(kind=event.kind, payload=event.model_dump(mode="json")))

    def publish(self, events: Iterable[LedgerEvent]) -> None:
        """Deliver already-committed events to subscribers, in order.

        A failing subscriber is logged and skipped; the mutation it observes
        has already committed and other subscribers still receive the event.
        """

        for event in events:
            for callback in list(self._subscribers):
                try:
                    callback(event)
                except Exception:
                    _logger.exception("audit subscriber %r failed on %s", callback, event.kind)

    def list_events(
        self,
        session: Session,
        *,
        kind: str | None = None,
        after_seq: int = 0,
        limit: int = 100,
    ) -> list[LoggedEvent]:
        """Return persisted events with ``seq > after_seq`` in log order."""

        if limit <= 0:
            raise ValueError("limit must be a positive integer")
        if kind is not None and kind not in EVENT_KINDS:
            raise ValueError(f"unknown event kind: {kind!r}")

        stmt = select(AuditEvent).where(AuditEvent.seq > after_seq)
        if kind is not None:
            stmt = stmt.where(AuditEvent.kind == kind)
        rows = session.execute(stmt.order_by(AuditEvent.seq).limit(limit)).scalars().all()
        return [
            LoggedEvent(
                seq=row.seq,
                recorded_at=row.recorded_at,
                event=_EVENT_ADAPTER.validate_python(row.payload),
            )
            for row in rows
        ]


__all__ = [
    "TransactionRecorded",
    "TransactionStatusUpdated",
    "NotificationPreferencesSet",
    "LedgerEvent",
    "EVENT_KINDS",
    "LoggedEvent",
    "AuditEventLog",
]
