"""Engine and session helpers for the ledger database.

One engine per process, bound on first use to ``DATABASE_URL`` (or an explicit
override). Every ledger mutation runs inside ``session_scope`` so that all of
its writes commit together or not at all.

Usage
-----
from db.client import session_scope

with session_scope() as s:
    s.get(LedgerTransaction, tx_id)
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

_ENGINE: Engine | None = None
_SESSION_MAKER: sessionmaker[Session] | None = None
_DB_URL: str | None = None

SQLITE_BUSY_TIMEOUT_MS = 5000


def _database_url(override: str | None = None) -> str:
    url = override or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set; cannot initialize database client")
    return url


def _enable_sqlite_pragmas(engine: Engine) -> None:
    # SQLite leaves foreign keys off per connection; the user index relies on them.
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn, _record):  # pragma: no cover - driver bridge
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.execute(f"PRAGMA busy_timeout = {SQLITE_BUSY_TIMEOUT_MS}")
        cursor.close()


def get_engine(*, database_url: str | None = None) -> Engine:
    """Return the process-wide engine, creating it on first use.

    Asking for a different URL once bound raises ``RuntimeError``; call
    ``dispose_engine`` first to switch databases.
    """

    global _ENGINE, _SESSION_MAKER, _DB_URL
    url = _database_url(database_url)
    if _ENGINE is not None:
        if url != _DB_URL:
            raise RuntimeError(
                f"database client is bound to {_DB_URL!r}; "
                "call dispose_engine() before using a different DATABASE_URL"
            )
        return _ENGINE

    engine = create_engine(url, pool_pre_ping=True)
    if make_url(url).get_backend_name() == "sqlite":
        _enable_sqlite_pragmas(engine)
    _SESSION_MAKER = sessionmaker(bind=engine, expire_on_commit=False, class_=Session)
    _ENGINE, _DB_URL = engine, url
    return engine


def dispose_engine() -> None:
    """Close pooled connections and unbind so the next call may pick a new URL."""

    global _ENGINE, _SESSION_MAKER, _DB_URL
    if _ENGINE is not None:
        _ENGINE.dispose()
    _ENGINE = _SESSION_MAKER = _DB_URL = None


def get_session(*, database_url: str | None = None) -> Session:
    get_engine(database_url=database_url)
    assert _SESSION_MAKER is not None  # bound by get_engine
    return _SESSION_MAKER()


@contextmanager
def session_scope(*, database_url: str | None = None) -> Iterator[Session]:
    """Yield a session; commit on clean exit, roll back on any exception."""

    session = get_session(database_url=database_url)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_schema(*, database_url: str | None = None) -> None:
    """Create every ledger table that does not exist yet.

    Deployed databases are migrated with Alembic; this helper serves local
    development, the CLI ``init-db`` command and the test suite.
    """

    from .models.ledger import Base  # local import keeps client import-light

    Base.metadata.create_all(bind=get_engine(database_url=database_url))


__all__ = [
    "SQLITE_BUSY_TIMEOUT_MS",
    "get_engine",
    "dispose_engine",
    "get_session",
    "session_scope",
    "create_schema",
]
