"""Transaction ledger service.

``TransactionLedger`` is the single entry point for callers. It resolves the
caller through an ``IdentityContext``, validates arguments, and performs each
mutation inside one database transaction held under a per-ledger lock:

- validation failures raise a :class:`~tx_ledger.errors.LedgerError` subclass
  and roll back every provisional write of the call;
- accepted mutations append their audit events in the same transaction and
  deliver them to subscribers only after commit.

Read-only operations open their own session, take no lock and never write.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager

from db.client import session_scope
from db.models.ledger import LedgerCounter, LedgerTransaction, LedgerUserIndex
from sqlalchemy.orm import Session

from .access import AccessControl, AdminAccessControl, IdentityContext
from .audit import (
    AuditEventLog,
    LedgerEvent,
    LoggedEvent,
    NotificationPreferencesSet,
    TransactionRecorded,
    TransactionStatusUpdated,
)
from .counter import InteractionCounter
from .errors import (
    DuplicateTransaction,
    InvalidAmount,
    InvalidIdentifier,
    InvalidStatus,
    InvalidType,
    LedgerError,
    NotFound,
    PermissionDenied,
)
from .logging_setup import get_logger
from .models import (
    ACTION_RECORD_TRANSACTION,
    NO_FILTER,
    UINT_BITS,
    Identity,
    NotificationCategory,
    Transaction,
    TransactionStatus,
    TransactionType,
    TxId,
    coerce_member,
    is_uint,
)
from .preferences import enabled_categories, validate_categories, write_preferences
from .query import compute_window, fetch_history, row_to_transaction, user_index_length

_logger = get_logger("tx_ledger.ledger")

TRANSACTION_COUNTER = "transactions"


def _system_clock() -> int:
    return int(time.time())


def _require_positive(value: object, error: type[LedgerError], what: str) -> int:
    if not is_uint(value) or value == 0:
        raise error(f"{what} must be a non-zero unsigned {UINT_BITS}-bit integer, got {value!r}")
    return value


class TransactionLedger:
    """Records transactions, their status, and per-user notification settings.

    Parameters
    ----------
    admin:
        The administrator identity, fixed for the lifetime of the ledger.
        Must be non-zero. It is seeded with every notification category
        enabled.
    identity:
        Resolves the caller of each operation.
    database_url:
        Optional DB URL override. Falls back to ``DATABASE_URL`` when ``None``.
    access_control:
        Authorization policy; defaults to :class:`AdminAccessControl` over
        ``admin``.
    clock:
        Returns the current time as integer epoch seconds.
    counter:
        Optional interaction counter notified of each recorded transaction.
    seed_admin:
        Write the admin's notification preferences at construction. Read-only
        hosts pass ``False`` so building a ledger never writes.
    """

    def __init__(
        self,
        *,
        admin: Identity,
        identity: IdentityContext,
        database_url: str | None = None,
        access_control: AccessControl | None = None,
        clock: Callable[[], int] | None = None,
        counter: InteractionCounter | None = None,
        seed_admin: bool = True,
    ) -> None:
        self._admin = _require_positive(admin, InvalidIdentifier, "admin")
        self._identity = identity
        self._database_url = database_url
        self._access = access_control or AdminAccessControl(self._admin)
        self._clock = clock or _system_clock
        self._counter = counter
        self._lock = threading.RLock()
        self.audit = AuditEventLog()

        if seed_admin:
            # Seeding is a construction side effect, not a caller action: no events.
            with self._lock, session_scope(database_url=self._database_url) as session:
                write_preferences(session, self._admin, list(NotificationCategory), True)

    @property
    def admin(self) -> Identity:
        return self._admin

    # ---- plumbing -----------------------------------------------------------

    @contextmanager
    def _mutation(self, op: str) -> Iterator[tuple[Session, list[LedgerEvent]]]:
        events: list[LedgerEvent] = []
        with self._lock:
            try:
                with session_scope(database_url=self._database_url) as session:
                    yield session, events
            except LedgerError as exc:
                _logger.warning("%s rejected: %s: %s", op, exc.code, exc)
                raise
            self.audit.publish(events)

    def _caller(self) -> Identity:
        return _require_positive(self._identity.current_caller(), InvalidIdentifier, "caller")

    def _emit(self, session: Session, events: list[LedgerEvent], event: LedgerEvent) -> None:
        self.audit.record(session, event)
        events.append(event)

    # ---- transactions -------------------------------------------------------

    def record_transaction(
        self,
        id: TxId,
        type: TransactionType | int,
        amount: int,
        description: str | None = None,
    ) -> bool:
        """Record a new transaction owned by the current caller.

        Checks, in order: non-zero caller; ``id`` in range; known ``type``;
        ``amount`` in range; ``id`` not already recorded. "In range" means
        non-zero and at most 256 bits. On success the transaction starts
        ``PENDING``, is appended to the caller's history, bumps the global
        counter and emits ``TransactionRecorded``.
        """

        with self._mutation("record_transaction") as (session, events):
            caller = self._caller()
            tx_id = _require_positive(id, InvalidIdentifier, "transaction id")
            tx_type = coerce_member(TransactionType, type, InvalidType)
            amt = _require_positive(amount, InvalidAmount, "amount")
            if session.get(LedgerTransaction, tx_id) is not None:
                raise DuplicateTransaction(f"transaction {tx_id:#x} already exists")

            now = self._clock()
            session.add(
                LedgerTransaction(
                    id=tx_id,
                    owner=caller,
                    tx_type=int(tx_type),
                    amount=amt,
                    timestamp=now,
                    status=int(TransactionStatus.PENDING),
                    description=description,
                )
            )
            session.add(
                LedgerUserIndex(
                    user=caller,
                    position=user_index_length(session, caller),
                    tx_id=tx_id,
                )
            )
            counter = session.get(LedgerCounter, TRANSACTION_COUNTER)
            if counter is None:
                counter = LedgerCounter(name=TRANSACTION_COUNTER, value=0)
                session.add(counter)
            counter.value += 1

            if self._counter is not None:
                self._counter.increment(caller, ACTION_RECORD_TRANSACTION, session=session)

            self._emit(
                session,
                events,
                TransactionRecorded(id=tx_id, user=caller, type=tx_type, amount=amt, timestamp=now),
            )
            _logger.info("recorded tx=%#x owner=%#x type=%s", tx_id, caller, tx_type.name)
        return True

    def update_transaction_status(self, id: TxId, new_status: TransactionStatus | int) -> bool:
        """Overwrite a transaction's status as its owner or the admin.

        Any status may follow any other; no transition graph is enforced.
        """

        with self._mutation("update_transaction_status") as (session, events):
            caller = self._caller()
            tx_id = _require_positive(id, InvalidIdentifier, "transaction id")
            status = coerce_member(TransactionStatus, new_status, InvalidStatus)
            row = session.get(LedgerTransaction, tx_id)
            if row is None:
                raise NotFound(f"transaction {tx_id:#x} does not exist")
            if caller != row.owner and not self._access.is_admin(caller):
                raise PermissionDenied(
                    f"{caller:#x} may not update transaction {tx_id:#x}"
                )

            old = TransactionStatus(row.status)
            row.status = int(status)
            self._emit(
                session,
                events,
                TransactionStatusUpdated(
                    id=tx_id, old_status=old, new_status=status, timestamp=self._clock()
                ),
            )
            _logger.info("status tx=%#x %s -> %s by %#x", tx_id, old.name, status.name, caller)
        return True

    def get_transaction_details(self, id: TxId) -> Transaction:
        if not is_uint(id) or id == 0:
            raise NotFound(f"transaction {id!r} does not exist")
        with session_scope(database_url=self._database_url) as session:
            row = session.get(LedgerTransaction, id)
            if row is None:
                raise NotFound(f"transaction {id:#x} does not exist")
            return row_to_transaction(row)

    def get_transaction_history(
        self,
        user: Identity,
        page: int,
        page_size: int,
        filter_type: TransactionType | int = NO_FILTER,
        filter_status: TransactionStatus | int = NO_FILTER,
    ) -> list[Transaction]:
        if not is_uint(user):
            # Still reject bad paging arguments for identities that cannot exist.
            compute_window(0, page, page_size)
            return []
        with session_scope(database_url=self._database_url) as session:
            return fetch_history(
                session,
                user,
                page,
                page_size,
                filter_type=filter_type,
                filter_status=filter_status,
            )

    def get_transaction_count(self) -> int:
        with session_scope(database_url=self._database_url) as session:
            counter = session.get(LedgerCounter, TRANSACTION_COUNTER)
            return 0 if counter is None else counter.value

    def get_user_transaction_count(self, user: Identity) -> int:
        if not is_uint(user):
            return 0
        with session_scope(database_url=self._database_url) as session:
            return user_index_length(session, user)

    # ---- notification preferences -------------------------------------------

    def set_notification_preferences(
        self, categories: Iterable[NotificationCategory | int], enabled: bool
    ) -> bool:
        """Set every listed category to ``enabled`` for the current caller.

        The whole list is validated before anything is written; one invalid
        element rejects the call. One event is emitted per listed element.
        """

        with self._mutation("set_notification_preferences") as (session, events):
            caller = self._caller()
            checked = validate_categories(categories)
            write_preferences(session, caller, checked, bool(enabled))
            for category in checked:
                self._emit(
                    session,
                    events,
                    NotificationPreferencesSet(user=caller, category=category, enabled=bool(enabled)),
                )
        return True

    def get_notification_preferences(self, user: Identity) -> list[NotificationCategory]:
        if not is_uint(user):
            return []
        with session_scope(database_url=self._database_url) as session:
            return enabled_categories(session, user)

    # ---- audit log and counter pass-throughs --------------------------------

    def get_audit_events(
        self, *, kind: str | None = None, after_seq: int = 0, limit: int = 100
    ) -> list[LoggedEvent]:
        with session_scope(database_url=self._database_url) as session:
            return self.audit.list_events(session, kind=kind, after_seq=after_seq, limit=limit)

    def track_interaction(self, action_id: int) -> int:
        if self._counter is None:
            raise RuntimeError("no interaction counter configured")
        caller = self._caller()
        with self._lock:
            return self._counter.increment(caller, action_id)

    def get_user_action_count(self, user: Identity, action_id: int) -> int:
        if self._counter is None:
            raise RuntimeError("no interaction counter configured")
        if not is_uint(user):
            return 0
        return self._counter.read(user, action_id)


__all__ = [
    "TRANSACTION_COUNTER",
    "TransactionLedger",
]
