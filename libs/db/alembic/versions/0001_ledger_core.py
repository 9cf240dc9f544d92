# ruff: noqa: I001
"""Ledger core tables: transactions, user index, counters, preferences, audit log.

Revision ID: 0001_ledger_core
Revises: None
Create Date: 2026-10-19
"""

from __future__ import annotations  # ruff: noqa: I001

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_ledger_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# Mirrors db.models.ledger.UINT_DIGITS (zero-padded 256-bit decimal text).
_UINT = sa.String(78)


def upgrade() -> None:
    op.create_table(
        "ledger_transactions",
        sa.Column("id", _UINT, primary_key=True),
        sa.Column("owner", _UINT, nullable=False),
        sa.Column("tx_type", sa.SmallInteger(), nullable=False),
        sa.Column("amount", _UINT, nullable=False),
        sa.Column("timestamp", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.SmallInteger(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.CheckConstraint("tx_type BETWEEN 1 AND 5", name="ck_ledger_tx_type"),
        sa.CheckConstraint("status BETWEEN 1 AND 4", name="ck_ledger_tx_status"),
    )
    op.create_index("ix_ledger_transactions_owner", "ledger_transactions", ["owner"])

    op.create_table(
        "ledger_user_index",
        sa.Column("user", _UINT, primary_key=True),
        sa.Column("position", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column(
            "tx_id",
            _UINT,
            sa.ForeignKey("ledger_transactions.id"),
            nullable=False,
            unique=True,
        ),
    )

    op.create_table(
        "ledger_counters",
        sa.Column("name", sa.String(64), primary_key=True),
        sa.Column("value", sa.BigInteger(), nullable=False, server_default=sa.text("0")),
    )

    op.create_table(
        "notification_preferences",
        sa.Column("user", _UINT, primary_key=True),
        sa.Column("category", sa.SmallInteger(), primary_key=True, autoincrement=False),
        sa.Column("enabled", sa.Boolean(), nullable=False),
        sa.CheckConstraint("category BETWEEN 1 AND 4", name="ck_notification_pref_category"),
    )

    op.create_table(
        "audit_events",
        sa.Column("seq", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("kind", sa.String(64), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column(
            "recorded_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )
    op.create_index("ix_audit_events_kind", "audit_events", ["kind"])

    op.create_table(
        "interaction_counts",
        sa.Column("user", _UINT, primary_key=True),
        sa.Column("action_id", _UINT, primary_key=True),
        sa.Column("count", sa.BigInteger(), nullable=False, server_default=sa.text("0")),
    )


def downgrade() -> None:
    op.drop_table("interaction_counts")
    op.drop_index("ix_audit_events_kind", table_name="audit_events")
    op.drop_table("audit_events")
    op.drop_table("notification_preferences")
    op.drop_table("ledger_counters")
    op.drop_table("ledger_user_index")
    op.drop_index("ix_ledger_transactions_owner", table_name="ledger_transactions")
    op.drop_table("ledger_transactions")
