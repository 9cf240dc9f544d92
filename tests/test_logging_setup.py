from __future__ import annotations

import io
import logging
from collections.abc import Iterator

import pytest
from tx_ledger import TransactionLedger, TransactionType
from tx_ledger.logging_setup import configure_logging, get_logger, reset_logging


@pytest.fixture(autouse=True)
def _reset() -> Iterator[None]:
    reset_logging()
    yield
    reset_logging()


def test_configure_routes_package_records_to_stream(ledger: TransactionLedger):
    stream = io.StringIO()
    logger = configure_logging("debug", fmt="%(levelname)s %(name)s %(message)s", stream=stream)

    ledger.record_transaction(0x1, TransactionType.DEPOSIT, 1)
    ledger.get_transaction_history(0xB0B, 0, 10)

    out = stream.getvalue()
    assert logger.name == "tx_ledger"
    assert logger.propagate is False
    assert "INFO tx_ledger.ledger recorded tx=0x1" in out
    assert "DEBUG tx_ledger.query history" in out


def test_configure_is_idempotent():
    first, second = io.StringIO(), io.StringIO()
    configure_logging("INFO", stream=first)
    configure_logging("INFO", stream=second)

    get_logger("tx_ledger.test").info("hello")

    assert "hello" in first.getvalue()
    assert second.getvalue() == ""


@pytest.mark.parametrize(
    ("level", "expected"),
    [("warning", logging.WARNING), ("15", 15), ("bogus", logging.INFO), (logging.ERROR, logging.ERROR)],
)
def test_level_parsing(level, expected):
    assert configure_logging(level, stream=io.StringIO()).level == expected


def test_level_from_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("TX_LEDGER_LOG_LEVEL", "ERROR")
    assert configure_logging(stream=io.StringIO()).level == logging.ERROR


def test_reset_restores_propagation():
    configure_logging("INFO", stream=io.StringIO())
    reset_logging()

    logger = logging.getLogger("tx_ledger")
    assert logger.propagate is True
    assert all(isinstance(h, logging.NullHandler) for h in logger.handlers)
