"""
Shared enumerations for database models.

Using Python enums mapped to database enums ensures that
only valid values can be stored. Values are stored in their
lowercase form ("debit", "completed", ...), matching the
existing ledger schema.
"""

import enum


class AccountStatus(str, enum.Enum):
    """Lifecycle of an account. Money only moves on ACTIVE ones."""
    ACTIVE = "active"
    FROZEN = "frozen"
    CLOSED = "closed"


class TransactionType(str, enum.Enum):
    """The business operation a transaction records."""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    TRANSFER = "transfer"


class TransactionStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class EntryType(str, enum.Enum):
    """Direction of a ledger entry."""
    DEBIT = "debit"
    CREDIT = "credit"


def enum_values(enum_cls) -> list[str]:
    """Column values for SAEnum(values_callable=...)."""
    return [member.value for member in enum_cls]
