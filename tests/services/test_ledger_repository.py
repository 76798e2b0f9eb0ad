"""
Tests for the LedgerRepository.

Tests cover:
- Account creation defaults
- Transaction creation and the status state machine
- Entry appends and balance aggregation
- Ledger ordering
- Row locking helper
"""

from decimal import Decimal

import pytest

from ledger_core.models.enums import (
    AccountStatus,
    EntryType,
    TransactionStatus,
    TransactionType,
)
from ledger_core.repositories.ledger_repository import (
    IllegalStatusTransition,
    LedgerRepository,
)


def make_deposit(repo, account_id, amount):
    """Helper: a completed deposit with its credit entry."""
    txn = repo.create_transaction(
        TransactionType.DEPOSIT,
        Decimal(amount),
        "USD",
        destination_account_id=account_id,
    )
    repo.append_ledger_entry(txn.id, account_id, EntryType.CREDIT, Decimal(amount))
    repo.set_transaction_status(txn, TransactionStatus.COMPLETED)
    return txn


# --- Accounts ---

class TestAccounts:

    def test_create_account_defaults_to_active(self, db_session):
        repo = LedgerRepository(db_session)
        account = repo.create_account(7, "checking", "USD")
        db_session.commit()

        assert account.id is not None
        assert account.user_id == 7
        assert account.account_type == "checking"
        assert account.status == AccountStatus.ACTIVE

    def test_get_missing_account_returns_none(self, db_session):
        repo = LedgerRepository(db_session)
        assert repo.get_account(999) is None

    def test_lock_accounts_returns_rows_in_id_order(self, db_session):
        repo = LedgerRepository(db_session)
        a = repo.create_account(1, "checking", "USD")
        b = repo.create_account(2, "savings", "USD")

        locked = repo.lock_accounts([b.id, a.id, 999])

        assert [acct.id for acct in locked] == [a.id, b.id]


# --- Transactions ---

class TestTransactions:

    def test_new_transaction_is_pending(self, db_session):
        repo = LedgerRepository(db_session)
        account = repo.create_account(1, "checking", "USD")

        txn = repo.create_transaction(
            TransactionType.DEPOSIT,
            Decimal("10.00"),
            "USD",
            destination_account_id=account.id,
            description="Paycheck",
        )

        assert txn.status == TransactionStatus.PENDING
        assert txn.source_account_id is None
        assert txn.destination_account_id == account.id
        assert txn.created_at is not None

    def test_pending_can_complete(self, db_session):
        repo = LedgerRepository(db_session)
        account = repo.create_account(1, "checking", "USD")
        txn = repo.create_transaction(
            TransactionType.DEPOSIT, Decimal("1.00"), "USD",
            destination_account_id=account.id,
        )

        repo.set_transaction_status(txn, TransactionStatus.COMPLETED)

        assert repo.get_transaction(txn.id).status == TransactionStatus.COMPLETED

    def test_setting_status_twice_is_a_programming_error(self, db_session):
        repo = LedgerRepository(db_session)
        account = repo.create_account(1, "checking", "USD")
        txn = repo.create_transaction(
            TransactionType.DEPOSIT, Decimal("1.00"), "USD",
            destination_account_id=account.id,
        )
        repo.set_transaction_status(txn, TransactionStatus.FAILED)

        with pytest.raises(IllegalStatusTransition):
            repo.set_transaction_status(txn, TransactionStatus.COMPLETED)

    def test_cannot_move_back_to_pending(self, db_session):
        repo = LedgerRepository(db_session)
        account = repo.create_account(1, "checking", "USD")
        txn = repo.create_transaction(
            TransactionType.DEPOSIT, Decimal("1.00"), "USD",
            destination_account_id=account.id,
        )

        with pytest.raises(IllegalStatusTransition):
            repo.set_transaction_status(txn, TransactionStatus.PENDING)


# --- Entries and balances ---

class TestEntries:

    def test_sum_of_account_without_entries_is_zero(self, db_session):
        repo = LedgerRepository(db_session)
        account = repo.create_account(1, "checking", "USD")

        balance = repo.sum_entries(account.id)

        assert balance == Decimal("0.00")
        assert isinstance(balance, Decimal)

    def test_sum_is_credits_minus_debits(self, db_session):
        repo = LedgerRepository(db_session)
        account = repo.create_account(1, "checking", "USD")
        make_deposit(repo, account.id, "100.00")
        make_deposit(repo, account.id, "25.50")

        txn = repo.create_transaction(
            TransactionType.WITHDRAWAL, Decimal("40.25"), "USD",
            source_account_id=account.id,
        )
        repo.append_ledger_entry(
            txn.id, account.id, EntryType.DEBIT, Decimal("40.25")
        )

        assert repo.sum_entries(account.id) == Decimal("85.25")

    def test_sum_only_counts_own_entries(self, db_session):
        repo = LedgerRepository(db_session)
        a = repo.create_account(1, "checking", "USD")
        b = repo.create_account(2, "checking", "USD")
        make_deposit(repo, a.id, "10.00")
        make_deposit(repo, b.id, "99.99")

        assert repo.sum_entries(a.id) == Decimal("10.00")
        assert repo.sum_entries(b.id) == Decimal("99.99")

    def test_sum_may_go_negative(self, db_session):
        # The repository does not police balances; the engine does
        repo = LedgerRepository(db_session)
        account = repo.create_account(1, "checking", "USD")
        txn = repo.create_transaction(
            TransactionType.WITHDRAWAL, Decimal("5.00"), "USD",
            source_account_id=account.id,
        )
        repo.append_ledger_entry(txn.id, account.id, EntryType.DEBIT, Decimal("5.00"))

        assert repo.sum_entries(account.id) == Decimal("-5.00")

    def test_list_entries_oldest_first(self, db_session):
        repo = LedgerRepository(db_session)
        account = repo.create_account(1, "checking", "USD")
        first = make_deposit(repo, account.id, "1.00")
        second = make_deposit(repo, account.id, "2.00")
        third = make_deposit(repo, account.id, "3.00")
        db_session.commit()

        entries = repo.list_entries(account.id)

        assert [e.transaction_id for e in entries] == [first.id, second.id, third.id]
        assert [e.amount for e in entries] == [
            Decimal("1.00"), Decimal("2.00"), Decimal("3.00"),
        ]

    def test_list_entries_can_be_read_twice(self, db_session):
        repo = LedgerRepository(db_session)
        account = repo.create_account(1, "checking", "USD")
        make_deposit(repo, account.id, "1.00")

        entries = repo.list_entries(account.id)

        assert list(entries) == list(entries)
        assert len(entries) == repo.count_entries(account.id) == 1

    def test_entries_survive_commit_with_exact_amounts(self, db_session):
        repo = LedgerRepository(db_session)
        account = repo.create_account(1, "checking", "USD")
        make_deposit(repo, account.id, "12345678901234.56")
        db_session.commit()

        entry = repo.list_entries(account.id)[0]

        assert entry.amount == Decimal("12345678901234.56")
        assert entry.entry_type == EntryType.CREDIT
