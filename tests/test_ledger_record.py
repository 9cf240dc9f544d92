from __future__ import annotations

import pytest
from tx_ledger import (
    DuplicateTransaction,
    InvalidAmount,
    InvalidIdentifier,
    InvalidType,
    NotFound,
    StaticIdentity,
    Transaction,
    TransactionLedger,
    TransactionStatus,
    TransactionType,
)

from tests.helpers.db import count_rows
from tests.helpers.ledger import ADMIN, USER, FakeClock


def test_record_then_details_returns_supplied_fields(ledger: TransactionLedger, clock: FakeClock):
    assert ledger.record_transaction(0x1, TransactionType.DEPOSIT, 100, "first") is True

    tx = ledger.get_transaction_details(0x1)
    assert tx == Transaction(
        id=0x1,
        owner=USER,
        type=TransactionType.DEPOSIT,
        amount=100,
        timestamp=clock.now,
        status=TransactionStatus.PENDING,
        description="first",
    )


def test_record_accepts_plain_int_type_and_empty_description(ledger: TransactionLedger):
    ledger.record_transaction(7, 3, 5, "")

    tx = ledger.get_transaction_details(7)
    assert tx.type is TransactionType.SWAP
    assert tx.description == ""


def test_description_is_optional(ledger: TransactionLedger):
    ledger.record_transaction(8, TransactionType.OTHER, 1)
    assert ledger.get_transaction_details(8).description is None


def test_fields_other_than_status_survive_status_updates(
    ledger: TransactionLedger, identity: StaticIdentity, clock: FakeClock
):
    ledger.record_transaction(0x10, TransactionType.WITHDRAWAL, 42, "atm")
    created = ledger.get_transaction_details(0x10)

    clock.advance(60)
    ledger.update_transaction_status(0x10, TransactionStatus.FAILED)
    with identity.acting_as(ADMIN):
        ledger.update_transaction_status(0x10, TransactionStatus.COMPLETED)

    after = ledger.get_transaction_details(0x10)
    assert after.status is TransactionStatus.COMPLETED
    assert (after.id, after.owner, after.type, after.amount, after.timestamp, after.description) == (
        created.id,
        created.owner,
        created.type,
        created.amount,
        created.timestamp,
        created.description,
    )


def test_duplicate_id_is_rejected_and_first_record_unchanged(
    ledger: TransactionLedger, identity: StaticIdentity, db_url: str
):
    ledger.record_transaction(0x1, TransactionType.DEPOSIT, 100, "orig")
    original = ledger.get_transaction_details(0x1)

    # Even a different caller with different fields cannot reuse the id.
    with identity.acting_as(ADMIN), pytest.raises(DuplicateTransaction):
        ledger.record_transaction(0x1, TransactionType.TRANSFER, 999, "dupe")

    assert ledger.get_transaction_details(0x1) == original
    assert ledger.get_transaction_count() == 1
    assert ledger.get_user_transaction_count(ADMIN) == 0
    assert count_rows(db_url, "ledger_user_index") == 1


@pytest.mark.parametrize(
    ("tx_id", "tx_type", "amount", "error"),
    [
        (0, TransactionType.DEPOSIT, 10, InvalidIdentifier),
        (1, 0, 10, InvalidType),
        (1, 6, 10, InvalidType),
        (1, TransactionType.DEPOSIT, 0, InvalidAmount),
        # Validation order: identifier is checked before type and amount.
        (0, 99, 0, InvalidIdentifier),
        (1, 99, 0, InvalidType),
    ],
)
def test_record_validation_errors_leave_no_state(
    ledger: TransactionLedger, db_url: str, tx_id, tx_type, amount, error
):
    with pytest.raises(error):
        ledger.record_transaction(tx_id, tx_type, amount, "x")

    assert ledger.get_transaction_count() == 0
    assert ledger.get_user_transaction_count(USER) == 0
    assert count_rows(db_url, "ledger_transactions") == 0
    assert count_rows(db_url, "audit_events") == 0


def test_boolean_type_is_not_accepted_as_an_integer(ledger: TransactionLedger):
    with pytest.raises(InvalidType):
        ledger.record_transaction(1, True, 10)


def test_counter_and_user_index_grow_once_per_record(
    ledger: TransactionLedger, identity: StaticIdentity
):
    for i in range(1, 4):
        ledger.record_transaction(i, TransactionType.DEPOSIT, i * 10)
    with identity.acting_as(ADMIN):
        ledger.record_transaction(100, TransactionType.SWAP, 1)

    assert ledger.get_transaction_count() == 4
    assert ledger.get_user_transaction_count(USER) == 3
    assert ledger.get_user_transaction_count(ADMIN) == 1


def test_details_for_zero_or_unknown_id_is_not_found(ledger: TransactionLedger):
    with pytest.raises(NotFound):
        ledger.get_transaction_details(0)
    with pytest.raises(NotFound):
        ledger.get_transaction_details(0xDEAD)


def test_ids_and_amounts_beyond_64_bits_round_trip(ledger: TransactionLedger):
    big_id = 2**251 + 17
    big_amount = 2**200
    ledger.record_transaction(big_id, TransactionType.TRANSFER, big_amount)

    tx = ledger.get_transaction_details(big_id)
    assert tx.id == big_id
    assert tx.amount == big_amount


def test_admin_must_be_non_zero(db_url: str):
    with pytest.raises(InvalidIdentifier):
        TransactionLedger(admin=0, identity=StaticIdentity(USER), database_url=db_url)


def test_largest_256_bit_values_are_accepted(ledger: TransactionLedger):
    top = 2**256 - 1
    ledger.record_transaction(top, TransactionType.DEPOSIT, top)

    tx = ledger.get_transaction_details(top)
    assert (tx.id, tx.amount) == (top, top)


def test_values_beyond_256_bits_raise_ledger_errors(ledger: TransactionLedger, db_url: str):
    with pytest.raises(InvalidIdentifier):
        ledger.record_transaction(2**256, TransactionType.DEPOSIT, 1)
    with pytest.raises(InvalidAmount):
        ledger.record_transaction(1, TransactionType.DEPOSIT, 2**256)
    with pytest.raises(NotFound):
        ledger.get_transaction_details(2**256)

    assert count_rows(db_url, "ledger_transactions") == 0
    assert count_rows(db_url, "audit_events") == 0


def test_reads_for_identities_beyond_256_bits_are_empty(ledger: TransactionLedger):
    ledger.record_transaction(1, TransactionType.DEPOSIT, 1)

    assert ledger.get_transaction_history(2**256, 0, 10) == []
    assert ledger.get_user_transaction_count(2**256) == 0
    assert ledger.get_notification_preferences(2**256) == []
    with pytest.raises(ValueError):
        ledger.get_transaction_history(2**256, 0, 0)


def test_zero_caller_cannot_record(
    ledger: TransactionLedger, identity: StaticIdentity, db_url: str
):
    with identity.acting_as(0), pytest.raises(InvalidIdentifier, match="caller"):
        ledger.record_transaction(1, TransactionType.DEPOSIT, 1)

    assert ledger.get_transaction_count() == 0
    assert count_rows(db_url, "ledger_transactions") == 0
    assert count_rows(db_url, "ledger_user_index") == 0
    assert count_rows(db_url, "audit_events") == 0


def test_seeding_can_be_skipped_for_read_only_use(db_url: str):
    reader = TransactionLedger(
        admin=ADMIN, identity=StaticIdentity(USER), database_url=db_url, seed_admin=False
    )

    assert reader.get_notification_preferences(ADMIN) == []
    assert count_rows(db_url, "notification_preferences") == 0
