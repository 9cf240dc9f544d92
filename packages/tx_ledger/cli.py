# ruff: noqa: I001
"""CLI for the ``tx_ledger`` package.

A Typer-based console interface over :class:`tx_ledger.ledger.TransactionLedger`.
Environment variables (``DATABASE_URL``, ``TX_LEDGER_ADMIN``,
``TX_LEDGER_CALLER``, ``TX_LEDGER_LOG_LEVEL``) are loaded from a local ``.env``
using ``python-dotenv`` before any command runs; explicit options win over the
environment. Ledger rejections and database failures print
``Error: <code>: <message>`` to stderr and exit with status 1.

Only mutating commands write to the database (including the admin's
preference seeding); read-only commands open the ledger without seeding.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from enum import IntEnum
from pathlib import Path
from typing import NoReturn

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from .config import LedgerSettings, parse_identity
from .errors import LedgerError
from .logging_setup import configure_logging
from .models import (
    NO_FILTER,
    Identity,
    NotificationCategory,
    Transaction,
    TransactionStatus,
    TransactionType,
)


# ---- Small module-level helpers used by CLI commands -------------------------


def _fail(message: str) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


@contextmanager
def _reported_errors() -> Iterator[None]:
    """Turn ledger and database failures into ``Error: ...`` and exit 1."""

    try:
        yield
    except LedgerError as e:
        _fail(f"{e.code}: {e}")
    except SQLAlchemyError as e:
        # ``orig`` holds the driver message, e.g. "no such table: ...".
        detail = getattr(e, "orig", None) or e
        _fail(f"DatabaseError: {detail} (has `tx-ledger init-db` been run?)")


def _identity_arg(raw: str, what: str) -> Identity:
    try:
        return parse_identity(raw)
    except ValueError as e:
        raise typer.BadParameter(f"invalid {what}: {raw!r} ({e})") from None


def _member_arg(enum_cls: type[IntEnum], raw: str) -> int:
    """Accept a member name (any case, ``-`` or ``_``) or its integer value.

    Unknown integers are passed through so the ledger reports its own error
    kind for them.
    """

    s = raw.strip()
    if s.lstrip("-").isdigit():
        return int(s)
    key = s.upper().replace("-", "_")
    try:
        return int(enum_cls[key])
    except KeyError:
        names = ", ".join(m.name.lower() for m in enum_cls)
        raise typer.BadParameter(f"{raw!r} is not one of: {names}") from None


def _settings(ctx: typer.Context) -> LedgerSettings:
    settings = ctx.obj
    assert isinstance(settings, LedgerSettings)  # bound by _root
    return settings


def _build_ledger(ctx: typer.Context, *, need_caller: bool = False):
    """Open the ledger; only commands that act as a caller seed the admin."""

    # Local imports keep CLI startup fast and --help free of DB dependencies
    from .access import StaticIdentity
    from .counter import SqlInteractionCounter
    from .ledger import TransactionLedger

    settings = _settings(ctx)
    if settings.admin is None:
        _fail("TX_LEDGER_ADMIN is not set (or pass --admin)")
    if need_caller and settings.caller is None:
        _fail("TX_LEDGER_CALLER is not set (or pass --caller)")
    caller = settings.caller if settings.caller is not None else settings.admin
    with _reported_errors():
        try:
            return TransactionLedger(
                admin=settings.admin,
                identity=StaticIdentity(caller),
                database_url=settings.database_url,
                counter=SqlInteractionCounter(database_url=settings.database_url),
                seed_admin=need_caller,
            )
        except RuntimeError as e:
            _fail(str(e))


def _print_transaction(tx: Transaction) -> None:
    typer.echo(f"id\t{tx.id:#x}")
    typer.echo(f"owner\t{tx.owner:#x}")
    typer.echo(f"type\t{tx.type.name.lower()}")
    typer.echo(f"amount\t{tx.amount}")
    typer.echo(f"timestamp\t{tx.timestamp}")
    typer.echo(f"status\t{tx.status.name.lower()}")
    typer.echo(f"description\t{tx.description or ''}")


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Shared transaction ledger: record transactions, update their status, "
        "manage notification preferences and page through history."
    ),
)


@app.callback()
def _root(
    ctx: typer.Context,
    *,
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
    admin: str | None = typer.Option(
        None, help="Administrator identity (decimal or 0x hex); env TX_LEDGER_ADMIN."
    ),
    caller: str | None = typer.Option(
        None, help="Identity to act as (decimal or 0x hex); env TX_LEDGER_CALLER."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    try:
        env = LedgerSettings.from_env()
    except ValueError as e:
        _fail(str(e))
    configure_logging(env.log_level)
    ctx.obj = env.override(
        database_url=database_url,
        admin=_identity_arg(admin, "admin") if admin is not None else None,
        caller=_identity_arg(caller, "caller") if caller is not None else None,
    )


@app.command("init-db")
def init_db_cmd(ctx: typer.Context) -> None:
    """Create the ledger tables (development databases; deployments use Alembic)."""

    from db.client import create_schema

    with _reported_errors():
        try:
            create_schema(database_url=_settings(ctx).database_url)
        except RuntimeError as e:
            _fail(str(e))
    typer.echo("ok")


@app.command("record")
def record_cmd(
    ctx: typer.Context,
    *,
    tx_id: str = typer.Option(..., "--id", help="Transaction fingerprint (non-zero)."),
    tx_type: str = typer.Option(..., "--type", help="deposit, withdrawal, swap, transfer, other."),
    amount: int = typer.Option(..., help="Unsigned, non-zero amount."),
    description: str | None = typer.Option(None, help="Optional short annotation."),
) -> None:
    """Record a transaction owned by the caller."""

    ledger = _build_ledger(ctx, need_caller=True)
    with _reported_errors():
        ledger.record_transaction(
            _identity_arg(tx_id, "id"),
            _member_arg(TransactionType, tx_type),
            amount,
            description,
        )
    typer.echo("ok")


@app.command("update-status")
def update_status_cmd(
    ctx: typer.Context,
    *,
    tx_id: str = typer.Option(..., "--id", help="Transaction fingerprint."),
    status: str = typer.Option(..., help="pending, completed, failed, cancelled."),
) -> None:
    """Set a transaction's status (owner or admin only)."""

    ledger = _build_ledger(ctx, need_caller=True)
    with _reported_errors():
        ledger.update_transaction_status(
            _identity_arg(tx_id, "id"), _member_arg(TransactionStatus, status)
        )
    typer.echo("ok")


@app.command("show")
def show_cmd(
    ctx: typer.Context,
    *,
    tx_id: str = typer.Option(..., "--id", help="Transaction fingerprint."),
) -> None:
    """Print one transaction as tab-separated ``field<TAB>value`` lines."""

    ledger = _build_ledger(ctx)
    with _reported_errors():
        tx = ledger.get_transaction_details(_identity_arg(tx_id, "id"))
    _print_transaction(tx)


@app.command("history")
def history_cmd(
    ctx: typer.Context,
    *,
    user: str = typer.Option(..., help="Identity whose history to list."),
    page: int = typer.Option(0, min=0, help="0-based page number."),
    page_size: int = typer.Option(10, min=1, help="Items per page before filtering."),
    tx_type: str | None = typer.Option(None, "--type", help="Only this transaction type."),
    status: str | None = typer.Option(None, help="Only this status."),
) -> None:
    """Show one page of a user's history as a table."""

    ledger = _build_ledger(ctx)
    with _reported_errors():
        items = ledger.get_transaction_history(
            _identity_arg(user, "user"),
            page,
            page_size,
            _member_arg(TransactionType, tx_type) if tx_type else NO_FILTER,
            _member_arg(TransactionStatus, status) if status else NO_FILTER,
        )

    table = Table(title=f"History page {page}")
    for column in ("id", "type", "amount", "status", "timestamp", "description"):
        table.add_column(column)
    for tx in items:
        table.add_row(
            f"{tx.id:#x}",
            tx.type.name.lower(),
            str(tx.amount),
            tx.status.name.lower(),
            str(tx.timestamp),
            tx.description or "",
        )
    Console().print(table)


@app.command("set-prefs")
def set_prefs_cmd(
    ctx: typer.Context,
    *,
    category: list[str] = typer.Option(
        ..., help="Category to set (repeatable): all, deposits, withdrawals, status-changes."
    ),
    enabled: bool = typer.Option(True, "--enabled/--disabled", help="Flag value to write."),
) -> None:
    """Enable or disable notification categories for the caller."""

    ledger = _build_ledger(ctx, need_caller=True)
    with _reported_errors():
        ledger.set_notification_preferences(
            [_member_arg(NotificationCategory, c) for c in category], enabled
        )
    typer.echo("ok")


@app.command("get-prefs")
def get_prefs_cmd(
    ctx: typer.Context,
    *,
    user: str = typer.Option(..., help="Identity whose preferences to list."),
) -> None:
    """Print enabled categories, one per line, in fixed order."""

    ledger = _build_ledger(ctx)
    with _reported_errors():
        categories = ledger.get_notification_preferences(_identity_arg(user, "user"))
    for category in categories:
        typer.echo(category.name.lower())


@app.command("events")
def events_cmd(
    ctx: typer.Context,
    *,
    kind: str | None = typer.Option(None, help="Only events of this kind."),
    after: int = typer.Option(0, min=0, help="Only events with sequence > AFTER."),
    limit: int = typer.Option(100, min=1, help="Maximum number of events."),
) -> None:
    """Print persisted audit events as ``seq<TAB>kind<TAB>json`` lines."""

    ledger = _build_ledger(ctx)
    with _reported_errors():
        try:
            logged = ledger.get_audit_events(kind=kind, after_seq=after, limit=limit)
        except ValueError as e:
            _fail(str(e))
    for item in logged:
        typer.echo(f"{item.seq}\t{item.event.kind}\t{item.event.model_dump_json()}")


@app.command("count")
def count_cmd(
    ctx: typer.Context,
    *,
    user: str | None = typer.Option(None, help="Count one user's transactions instead."),
) -> None:
    """Print the global transaction count (or one user's)."""

    ledger = _build_ledger(ctx)
    with _reported_errors():
        if user is None:
            n = ledger.get_transaction_count()
        else:
            n = ledger.get_user_transaction_count(_identity_arg(user, "user"))
    typer.echo(str(n))


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    app()
