"""Pytest configuration for test isolation.

The ``db`` library keeps one process-wide engine and refuses to rebind it to a
different URL. Every test gets its own SQLite file under ``tmp_path``, so the
shared engine is disposed after each test; ``DATABASE_URL`` and the CLI's
identity variables are cleared so a developer's ``.env`` cannot leak in.
"""

# ruff: noqa: E402, I001
from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

# Make sure the workspace package dirs are on sys.path so `tx_ledger` and `db`
# are importable without an install.
_ROOT = Path(__file__).resolve().parents[1]
sys.path[:0] = [
    p
    for p in [str(_ROOT / "packages"), str(_ROOT / "libs/db/src"), str(_ROOT)]
    if p not in sys.path
]

from db.client import dispose_engine
from tx_ledger import StaticIdentity, TransactionLedger
from tests.helpers.db import bootstrap_sqlite_db
from tests.helpers.ledger import ADMIN, USER, FakeClock


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in ("DATABASE_URL", "TX_LEDGER_ADMIN", "TX_LEDGER_CALLER", "TX_LEDGER_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    dispose_engine()
    yield
    dispose_engine()


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return bootstrap_sqlite_db(tmp_path / "ledger.db")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def identity() -> StaticIdentity:
    return StaticIdentity(USER)


@pytest.fixture
def ledger(db_url: str, identity: StaticIdentity, clock: FakeClock) -> TransactionLedger:
    return TransactionLedger(admin=ADMIN, identity=identity, database_url=db_url, clock=clock)
