"""
Ledger engine — the core of the banking system.

Every money operation (deposit, withdrawal, transfer) runs as
one store transaction:

1. Validate the arguments (nothing touches the store yet)
2. Begin a store transaction
3. Check (and for debits, lock) the accounts involved
4. Create a PENDING transaction record
5. Append its ledger entries
6. For debits, recompute the debited balance; abort if negative
7. Mark the transaction COMPLETED and commit

If anything fails after step 2, the whole attempt is rolled
back: no entries, no orphaned PENDING transaction. The engine
is the only writer of transactions and ledger entries.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from ledger_core.exceptions import (
    AccountNotFound,
    BalanceLimitExceeded,
    Conflict,
    InsufficientFunds,
    InvalidInput,
    StoreUnavailable,
)
from ledger_core.models.account import Account
from ledger_core.models.enums import (
    EntryType,
    TransactionStatus,
    TransactionType,
)
from ledger_core.models.ledger_entry import LedgerEntry
from ledger_core.models.types import CENT, MAX_AMOUNT
from ledger_core.repositories.ledger_repository import LedgerRepository

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATEs that mean "lost a race, try again":
# serialization_failure, deadlock_detected, lock_not_available
CONFLICT_SQLSTATES = {"40001", "40P01", "55P03"}
# numeric_value_out_of_range
OVERFLOW_SQLSTATES = {"22003"}


@dataclass(frozen=True)
class PostingResult:
    """Outcome of a successful deposit, withdrawal or transfer."""
    transaction_id: int
    transaction_type: TransactionType
    status: TransactionStatus
    amount: Decimal
    currency: str
    # Debited account for withdrawals and transfers,
    # credited account for deposits.
    account_id: int
    # Balance of account_id right after the posting
    balance: Decimal
    counterparty_account_id: int | None = None


def _parse_amount(amount) -> Decimal:
    """
    Turn a caller-supplied amount into a two-decimal Decimal.

    Floats are refused outright: by the time a value is a
    float it may already have lost the cents it was meant to
    carry.
    """
    if isinstance(amount, bool) or isinstance(amount, float):
        raise InvalidInput("amount must be a Decimal, int or numeric string")
    try:
        value = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidInput(f"amount {amount!r} is not a number") from None

    if not value.is_finite():
        raise InvalidInput("amount must be finite")
    if value <= 0:
        raise InvalidInput("amount must be positive")
    if value > MAX_AMOUNT:
        raise InvalidInput(f"amount must not exceed {MAX_AMOUNT}")
    if value != value.quantize(CENT):
        raise InvalidInput("amount must have at most 2 decimal places")
    return value.quantize(CENT)


def _parse_currency(currency) -> str:
    if not isinstance(currency, str) or not currency.strip():
        raise InvalidInput("currency is required")
    code = currency.strip().upper()
    if len(code) != 3 or not code.isascii() or not code.isalpha():
        raise InvalidInput(f"currency {currency!r} is not a 3-letter code")
    return code


def _parse_id(value, field: str = "account_id") -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"{field} must be an integer")
    if value <= 0:
        raise InvalidInput(f"{field} must be positive")
    return value


def _parse_description(description) -> str | None:
    if description is None:
        return None
    if not isinstance(description, str):
        raise InvalidInput("description must be a string")
    if len(description) > 255:
        raise InvalidInput("description must be at most 255 characters")
    return description or None


def _translate_store_error(exc: DBAPIError) -> Exception:
    """
    Map a driver error onto the ledger taxonomy.

    Lock timeouts, deadlocks and serialization failures become
    Conflict. Arithmetic overflow while summing a balance becomes
    BalanceLimitExceeded. Connection-level failures become
    StoreUnavailable. Anything else (integrity or programming
    errors) is a bug and is returned unchanged.
    """
    orig = exc.orig
    message = str(orig)
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate in CONFLICT_SQLSTATES or "database is locked" in message:
        return Conflict(f"Store conflict, retry the operation: {orig}")
    if sqlstate in OVERFLOW_SQLSTATES or "integer overflow" in message:
        return BalanceLimitExceeded()
    if exc.connection_invalidated or isinstance(
        exc, (OperationalError, InterfaceError)
    ):
        return StoreUnavailable(f"Store unavailable: {orig}")
    return exc


class LedgerEngine:
    """
    All money movement passes through this engine.

    Unlike a request-scoped service, the engine owns its store
    transactions: it takes a session factory and opens, commits
    or rolls back a session for every operation itself.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        *,
        lock_timeout_ms: int = 5000,
        record_failed_attempts: bool = False,
    ):
        self.session_factory = session_factory
        self.lock_timeout_ms = lock_timeout_ms
        self.record_failed_attempts = record_failed_attempts

    @contextmanager
    def _unit_of_work(self):
        """
        Run a block inside one store transaction.

        Session.begin() commits when the block exits cleanly and
        rolls back on any exception, including KeyboardInterrupt
        and other BaseExceptions raised while the caller is
        abandoning the call. The session is closed on every path.
        """
        try:
            with self.session_factory() as db, db.begin():
                self._apply_lock_timeout(db)
                yield LedgerRepository(db)
        except DBAPIError as exc:
            translated = _translate_store_error(exc)
            if translated is exc:
                raise
            if isinstance(translated, StoreUnavailable):
                logger.error("Ledger store unavailable: %s", exc.orig)
            elif isinstance(translated, Conflict):
                logger.warning("Ledger store conflict: %s", exc.orig)
            else:
                logger.warning("Ledger store overflow: %s", exc.orig)
            raise translated from exc

    def _apply_lock_timeout(self, db: Session) -> None:
        # SQLite bounds lock waits through the driver's busy timeout
        if db.get_bind().dialect.name == "postgresql":
            db.execute(
                text(f"SET LOCAL lock_timeout = {int(self.lock_timeout_ms)}")
            )

    # --- Accounts ---

    def open_account(
        self, owner_id: int, account_type: str, currency: str
    ) -> Account:
        """
        Open a new ACTIVE account.

        Pure creation, no ledger interaction: a new account
        starts with no entries and therefore a balance of 0.00.
        """
        if owner_id is None:
            raise InvalidInput("owner_id is required")
        owner_id = _parse_id(owner_id, "owner_id")
        if not isinstance(account_type, str) or not account_type.strip():
            raise InvalidInput("account_type is required")
        if len(account_type.strip()) > 50:
            raise InvalidInput("account_type must be at most 50 characters")
        currency = _parse_currency(currency)

        with self._unit_of_work() as repo:
            account = repo.create_account(
                owner_id, account_type.strip(), currency
            )

        logger.info(
            "Opened account %s for user %s (%s, %s)",
            account.id, owner_id, account.account_type, currency,
        )
        return account

    def get_account(self, account_id: int) -> Account:
        account_id = _parse_id(account_id)
        with self._unit_of_work() as repo:
            account = repo.get_account(account_id)
            if account is None:
                raise AccountNotFound([account_id])
        return account

    # --- Money movement ---

    def deposit(
        self,
        account_id: int,
        amount,
        currency: str,
        description: str | None = None,
    ) -> PostingResult:
        """
        Credit an account.

        Accounting:
            CREDIT account (balance increases)

        A credit can never make a balance go down, so deposits
        don't need the account lock. The new balance must stay
        within MAX_AMOUNT.
        """
        account_id = _parse_id(account_id)
        amount = _parse_amount(amount)
        currency = _parse_currency(currency)
        description = _parse_description(description)

        with self._unit_of_work() as repo:
            if repo.get_account(account_id) is None:
                raise AccountNotFound([account_id])

            txn = repo.create_transaction(
                TransactionType.DEPOSIT,
                amount,
                currency,
                destination_account_id=account_id,
                description=description,
            )
            repo.append_ledger_entry(
                txn.id, account_id, EntryType.CREDIT, amount
            )
            balance = repo.sum_entries(account_id)
            if balance > MAX_AMOUNT:
                raise BalanceLimitExceeded(account_id)
            repo.set_transaction_status(txn, TransactionStatus.COMPLETED)

        logger.info(
            "Deposit %s: %s %s into account %s",
            txn.id, amount, currency, account_id,
        )
        return PostingResult(
            transaction_id=txn.id,
            transaction_type=TransactionType.DEPOSIT,
            status=TransactionStatus.COMPLETED,
            amount=amount,
            currency=currency,
            account_id=account_id,
            balance=balance,
        )

    def withdraw(
        self,
        account_id: int,
        amount,
        currency: str,
        description: str | None = None,
    ) -> PostingResult:
        """
        Debit an account, refusing to take it below zero.

        Accounting:
            DEBIT account (balance decreases)

        The account row is locked before the debit is written,
        so a concurrent withdrawal waits until this one has
        committed or rolled back and then sees its effect on
        the balance.
        """
        account_id = _parse_id(account_id)
        amount = _parse_amount(amount)
        currency = _parse_currency(currency)
        description = _parse_description(description)

        try:
            with self._unit_of_work() as repo:
                if not repo.lock_accounts([account_id]):
                    raise AccountNotFound([account_id])

                txn = repo.create_transaction(
                    TransactionType.WITHDRAWAL,
                    amount,
                    currency,
                    source_account_id=account_id,
                    description=description,
                )
                repo.append_ledger_entry(
                    txn.id, account_id, EntryType.DEBIT, amount
                )
                balance = repo.sum_entries(account_id)
                if balance < 0:
                    raise InsufficientFunds(
                        account_id, balance + amount, amount
                    )
                repo.set_transaction_status(txn, TransactionStatus.COMPLETED)
        except InsufficientFunds as exc:
            self._reject(
                exc,
                TransactionType.WITHDRAWAL,
                amount,
                currency,
                source_account_id=account_id,
                description=description,
            )
            raise

        logger.info(
            "Withdrawal %s: %s %s from account %s",
            txn.id, amount, currency, account_id,
        )
        return PostingResult(
            transaction_id=txn.id,
            transaction_type=TransactionType.WITHDRAWAL,
            status=TransactionStatus.COMPLETED,
            amount=amount,
            currency=currency,
            account_id=account_id,
            balance=balance,
        )

    def transfer(
        self,
        source_account_id: int,
        destination_account_id: int,
        amount,
        currency: str,
        description: str | None = None,
    ) -> PostingResult:
        """
        Move money between two accounts.

        Accounting:
            DEBIT  source account (balance decreases)
            CREDIT destination account (balance increases)

        Both accounts are locked in ascending id order,
        whichever of them is the source. The source must not
        go negative; the destination must stay within MAX_AMOUNT.
        """
        source_account_id = _parse_id(
            source_account_id, "source_account_id"
        )
        destination_account_id = _parse_id(
            destination_account_id, "destination_account_id"
        )
        if source_account_id == destination_account_id:
            raise InvalidInput(
                "source and destination accounts must be different"
            )
        amount = _parse_amount(amount)
        currency = _parse_currency(currency)
        description = _parse_description(description)

        account_ids = {source_account_id, destination_account_id}
        try:
            with self._unit_of_work() as repo:
                locked = repo.lock_accounts(account_ids)
                missing = account_ids - {a.id for a in locked}
                if missing:
                    raise AccountNotFound(missing)

                txn = repo.create_transaction(
                    TransactionType.TRANSFER,
                    amount,
                    currency,
                    source_account_id=source_account_id,
                    destination_account_id=destination_account_id,
                    description=description,
                )
                repo.append_ledger_entry(
                    txn.id, source_account_id, EntryType.DEBIT, amount
                )
                repo.append_ledger_entry(
                    txn.id, destination_account_id, EntryType.CREDIT, amount
                )
                balance = repo.sum_entries(source_account_id)
                if balance < 0:
                    raise InsufficientFunds(
                        source_account_id, balance + amount, amount
                    )
                if repo.sum_entries(destination_account_id) > MAX_AMOUNT:
                    raise BalanceLimitExceeded(destination_account_id)
                repo.set_transaction_status(txn, TransactionStatus.COMPLETED)
        except InsufficientFunds as exc:
            self._reject(
                exc,
                TransactionType.TRANSFER,
                amount,
                currency,
                source_account_id=source_account_id,
                destination_account_id=destination_account_id,
                description=description,
            )
            raise

        logger.info(
            "Transfer %s: %s %s from account %s to account %s",
            txn.id, amount, currency,
            source_account_id, destination_account_id,
        )
        return PostingResult(
            transaction_id=txn.id,
            transaction_type=TransactionType.TRANSFER,
            status=TransactionStatus.COMPLETED,
            amount=amount,
            currency=currency,
            account_id=source_account_id,
            balance=balance,
            counterparty_account_id=destination_account_id,
        )

    def _reject(
        self,
        exc: InsufficientFunds,
        transaction_type: TransactionType,
        amount: Decimal,
        currency: str,
        **refs,
    ) -> None:
        """
        Called after a rejected attempt has been rolled back.

        With record_failed_attempts on, the attempt is written
        again in its own store transaction as a FAILED row with
        no ledger entries, so rejected attempts stay auditable
        without ever touching a balance. A store failure while
        recording is logged; the caller still raises exc.
        """
        logger.warning("Rejected %s: %s", transaction_type.value, exc)
        if not self.record_failed_attempts:
            return

        try:
            with self._unit_of_work() as repo:
                txn = repo.create_transaction(
                    transaction_type, amount, currency, **refs
                )
                repo.set_transaction_status(txn, TransactionStatus.FAILED)
        except (Conflict, StoreUnavailable) as audit_exc:
            logger.error(
                "Could not record failed %s attempt: %s",
                transaction_type.value, audit_exc,
            )
            return
        logger.info(
            "Recorded failed %s attempt as transaction %s",
            transaction_type.value, txn.id,
        )

    # --- Reads ---

    def get_balance(self, account_id: int) -> Decimal:
        """
        Current balance, derived from the account's entries.

        Balance is never stored — it's always the sum of credits
        minus the sum of debits, computed by the store.
        """
        account_id = _parse_id(account_id)
        with self._unit_of_work() as repo:
            if repo.get_account(account_id) is None:
                raise AccountNotFound([account_id])
            return repo.sum_entries(account_id)

    def get_account_with_balance(
        self, account_id: int
    ) -> tuple[Account, Decimal]:
        """Load an account and its balance in one store transaction."""
        account_id = _parse_id(account_id)
        with self._unit_of_work() as repo:
            account = repo.get_account(account_id)
            if account is None:
                raise AccountNotFound([account_id])
            return account, repo.sum_entries(account_id)

    def list_ledger(self, account_id: int) -> list[LedgerEntry]:
        """Return all entries for an account, oldest first."""
        account_id = _parse_id(account_id)
        with self._unit_of_work() as repo:
            if repo.get_account(account_id) is None:
                raise AccountNotFound([account_id])
            return repo.list_entries(account_id)
