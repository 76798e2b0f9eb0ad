"""
Ledger repository — typed access to accounts, transactions
and ledger entries.

The repository has no business rules and no write authority
of its own. It runs inside whatever store transaction the
caller has open on the session and never commits or rolls
back. flush() is only used to get store-assigned ids.
"""

from decimal import Decimal

from sqlalchemy import case, func, select, type_coerce
from sqlalchemy.orm import Session

from ledger_core.models.account import Account
from ledger_core.models.enums import (
    AccountStatus,
    EntryType,
    TransactionStatus,
    TransactionType,
)
from ledger_core.models.ledger_entry import LedgerEntry
from ledger_core.models.transaction import Transaction
from ledger_core.models.types import Money


class IllegalStatusTransition(RuntimeError):
    """
    A transaction status change the state machine forbids.

    This is a programming error in the caller, never a
    condition a client can trigger, so it is deliberately
    not a LedgerError.
    """


class LedgerRepository:

    def __init__(self, db: Session):
        self.db = db

    # --- Accounts ---

    def create_account(
        self, owner_id: int, account_type: str, currency: str
    ) -> Account:
        account = Account(
            user_id=owner_id,
            account_type=account_type,
            currency=currency,
            status=AccountStatus.ACTIVE,
        )
        self.db.add(account)
        self.db.flush()
        return account

    def get_account(self, account_id: int) -> Account | None:
        return self.db.get(Account, account_id)

    def lock_accounts(self, account_ids) -> list[Account]:
        """
        Lock the given accounts FOR UPDATE in ascending id order.

        One statement covers every id, and rows are locked in
        the order they are returned, so two transfers touching
        the same pair of accounts always lock them in the same
        order and cannot deadlock each other. Missing ids are
        simply absent from the result.
        """
        ordered = sorted(set(account_ids))
        accounts = self.db.execute(
            select(Account)
            .where(Account.id.in_(ordered))
            .order_by(Account.id)
            .with_for_update()
        ).scalars().all()
        return list(accounts)

    # --- Transactions ---

    def create_transaction(
        self,
        transaction_type: TransactionType,
        amount: Decimal,
        currency: str,
        source_account_id: int | None = None,
        destination_account_id: int | None = None,
        description: str | None = None,
    ) -> Transaction:
        """Insert a new transaction in PENDING status."""
        txn = Transaction(
            transaction_type=transaction_type,
            amount=amount,
            currency=currency,
            source_account_id=source_account_id,
            destination_account_id=destination_account_id,
            status=TransactionStatus.PENDING,
            description=description,
        )
        self.db.add(txn)
        self.db.flush()
        return txn

    def get_transaction(self, transaction_id: int) -> Transaction | None:
        return self.db.get(Transaction, transaction_id)

    def set_transaction_status(
        self, txn: Transaction, status: TransactionStatus
    ) -> Transaction:
        """
        Move a PENDING transaction to a terminal status.

        Raises IllegalStatusTransition if the transaction is
        already terminal or the target status is not terminal.
        """
        if not txn.can_transition_to(status):
            raise IllegalStatusTransition(
                f"Transaction {txn.id} cannot move from "
                f"{txn.status.value} to {status.value}"
            )
        txn.status = status
        self.db.flush()
        return txn

    # --- Ledger entries ---

    def append_ledger_entry(
        self,
        transaction_id: int,
        account_id: int,
        entry_type: EntryType,
        amount: Decimal,
    ) -> LedgerEntry:
        entry = LedgerEntry(
            transaction_id=transaction_id,
            account_id=account_id,
            entry_type=entry_type,
            amount=amount,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def sum_entries(self, account_id: int) -> Decimal:
        """
        Balance of an account: sum of credits minus sum of debits.

        Computed by the store in a single aggregate, so it only
        ever sees committed entries plus those written by the
        current transaction. Returns 0.00 for an account with
        no entries.
        """
        signed_amount = case(
            (LedgerEntry.entry_type == EntryType.CREDIT, LedgerEntry.amount),
            else_=-LedgerEntry.amount,
        )
        balance = self.db.execute(
            select(
                type_coerce(func.coalesce(func.sum(signed_amount), 0), Money)
            ).where(LedgerEntry.account_id == account_id)
        ).scalar_one()
        return balance

    def list_entries(self, account_id: int) -> list[LedgerEntry]:
        """Return all entries for an account, oldest first."""
        entries = self.db.execute(
            select(LedgerEntry)
            .where(LedgerEntry.account_id == account_id)
            .order_by(LedgerEntry.created_at.asc(), LedgerEntry.id.asc())
        ).scalars().all()
        return list(entries)

    def count_entries(self, account_id: int) -> int:
        return self.db.execute(
            select(func.count(LedgerEntry.id))
            .where(LedgerEntry.account_id == account_id)
        ).scalar_one()
