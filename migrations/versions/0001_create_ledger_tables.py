"""create accounts, transactions and ledger_entries

Revision ID: 0001
Revises:
Create Date: 2026-10-17 00:00:00
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from ledger_core.models.types import Money

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

account_status = sa.Enum(
    "active", "frozen", "closed", name="account_status_enum"
)
transaction_type = sa.Enum(
    "deposit", "withdrawal", "transfer", name="transaction_type_enum"
)
transaction_status = sa.Enum(
    "pending", "completed", "failed", name="transaction_status_enum"
)
entry_type = sa.Enum("debit", "credit", name="entry_type_enum")


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column(
            "status", account_status, nullable=False, server_default="active"
        ),
    )
    op.create_index("ix_accounts_user_id", "accounts", ["user_id"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("type", transaction_type, nullable=False),
        sa.Column("amount", Money(), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column(
            "source_account_id",
            sa.Integer(),
            sa.ForeignKey("accounts.id"),
            nullable=True,
        ),
        sa.Column(
            "destination_account_id",
            sa.Integer(),
            sa.ForeignKey("accounts.id"),
            nullable=True,
        ),
        sa.Column(
            "status", transaction_status, nullable=False,
            server_default="pending",
        ),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(), nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "amount > 0", name="ck_transactions_amount_positive"
        ),
        sa.CheckConstraint(
            "source_account_id IS NULL "
            "OR destination_account_id IS NULL "
            "OR source_account_id <> destination_account_id",
            name="ck_transactions_distinct_accounts",
        ),
    )
    op.create_index(
        "ix_transactions_source_account_id",
        "transactions", ["source_account_id"],
    )
    op.create_index(
        "ix_transactions_destination_account_id",
        "transactions", ["destination_account_id"],
    )

    op.create_table(
        "ledger_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "transaction_id",
            sa.Integer(),
            sa.ForeignKey("transactions.id"),
            nullable=False,
        ),
        sa.Column(
            "account_id",
            sa.Integer(),
            sa.ForeignKey("accounts.id"),
            nullable=False,
        ),
        sa.Column("entry_type", entry_type, nullable=False),
        sa.Column("amount", Money(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(), nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "amount > 0", name="ck_ledger_entries_amount_positive"
        ),
    )
    op.create_index(
        "ix_ledger_entries_transaction_id",
        "ledger_entries", ["transaction_id"],
    )
    op.create_index(
        "ix_ledger_entries_account_created",
        "ledger_entries", ["account_id", "created_at", "id"],
    )


def downgrade() -> None:
    op.drop_table("ledger_entries")
    op.drop_table("transactions")
    op.drop_table("accounts")
    entry_type.drop(op.get_bind(), checkfirst=True)
    transaction_status.drop(op.get_bind(), checkfirst=True)
    transaction_type.drop(op.get_bind(), checkfirst=True)
    account_status.drop(op.get_bind(), checkfirst=True)
