from __future__ import annotations

import pytest
from tx_ledger import (
    InvalidAmount,
    SqlInteractionCounter,
    StaticIdentity,
    TransactionLedger,
    TransactionType,
)
from tx_ledger.models import ACTION_RECORD_TRANSACTION

from tests.helpers.ledger import ADMIN, STRANGER, USER, FakeClock


@pytest.fixture
def counter(db_url: str) -> SqlInteractionCounter:
    return SqlInteractionCounter(database_url=db_url)


@pytest.fixture
def counted_ledger(
    db_url: str, identity: StaticIdentity, clock: FakeClock, counter: SqlInteractionCounter
) -> TransactionLedger:
    return TransactionLedger(
        admin=ADMIN, identity=identity, database_url=db_url, clock=clock, counter=counter
    )


def test_increment_and_read(counter: SqlInteractionCounter):
    assert counter.read(USER, 9) == 0
    assert counter.increment(USER, 9) == 1
    assert counter.increment(USER, 9) == 2
    assert counter.read(USER, 9) == 2
    # Counts are per (user, action).
    assert counter.read(USER, 10) == 0
    assert counter.read(STRANGER, 9) == 0


def test_recording_bumps_the_record_action(
    counted_ledger: TransactionLedger, counter: SqlInteractionCounter
):
    counted_ledger.record_transaction(1, TransactionType.DEPOSIT, 1)
    counted_ledger.record_transaction(2, TransactionType.DEPOSIT, 1)

    assert counted_ledger.get_user_action_count(USER, ACTION_RECORD_TRANSACTION) == 2
    assert counter.read(USER, ACTION_RECORD_TRANSACTION) == 2


def test_rejected_record_does_not_bump_counter(counted_ledger: TransactionLedger):
    with pytest.raises(InvalidAmount):
        counted_ledger.record_transaction(1, TransactionType.DEPOSIT, 0)

    assert counted_ledger.get_user_action_count(USER, ACTION_RECORD_TRANSACTION) == 0


def test_track_interaction_counts_for_current_caller(
    counted_ledger: TransactionLedger, identity: StaticIdentity
):
    assert counted_ledger.track_interaction(42) == 1
    with identity.acting_as(STRANGER):
        assert counted_ledger.track_interaction(42) == 1
    assert counted_ledger.track_interaction(42) == 2

    assert counted_ledger.get_user_action_count(USER, 42) == 2
    assert counted_ledger.get_user_action_count(STRANGER, 42) == 1


def test_pass_throughs_require_a_counter(ledger: TransactionLedger):
    with pytest.raises(RuntimeError):
        ledger.track_interaction(1)
    with pytest.raises(RuntimeError):
        ledger.get_user_action_count(USER, 1)
