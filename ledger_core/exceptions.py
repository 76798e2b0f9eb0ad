"""
Ledger error taxonomy.

Every failure the engine reports to its caller is one of the
LedgerError subclasses below. The HTTP layer maps each one to
a status code; nothing else needs to inspect error messages.

Any error raised after a store transaction has begun is raised
only after that transaction has been rolled back.
"""

from decimal import Decimal


class LedgerError(Exception):
    """Base class for all expected ledger failures."""


class InvalidInput(LedgerError):
    """
    Malformed, missing or non-positive arguments.

    Always raised before a store transaction is opened.
    """


class BalanceLimitExceeded(InvalidInput):
    """
    A credit would push a balance past the largest storable
    amount. Unlike its parent, raised from inside a store
    transaction, which has been rolled back.
    """

    def __init__(self, account_id: int | None = None):
        self.account_id = account_id
        target = f"account {account_id}" if account_id else "an account"
        super().__init__(f"Credit would take {target} past the balance limit")


class AccountNotFound(LedgerError):
    """One or more referenced accounts do not exist."""

    def __init__(self, account_ids):
        self.account_ids = sorted(account_ids)
        if len(self.account_ids) == 1:
            message = f"Account {self.account_ids[0]} not found"
        else:
            message = f"Accounts not found: {self.account_ids}"
        super().__init__(message)


class InsufficientFunds(LedgerError):
    """
    The debited account would end up with a negative balance.

    A business rejection, not a system error. The attempted
    transaction and all of its entries have been rolled back.
    """

    def __init__(self, account_id: int, available: Decimal, requested: Decimal):
        self.account_id = account_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient funds in account {account_id}: "
            f"available={available}, requested={requested}"
        )


class Conflict(LedgerError):
    """Lock contention or serialization failure. Safe to retry."""


class StoreUnavailable(LedgerError):
    """The store cannot be reached or failed to commit."""
