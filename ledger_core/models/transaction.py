"""
Transaction model.

Represents a business operation (deposit, withdrawal,
transfer) that generates ledger entries underneath.
Transactions add business context to the raw accounting
entries.

A transaction starts PENDING inside the store transaction
that writes its entries and leaves it either COMPLETED or
FAILED. Terminal rows are never modified again.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, ForeignKey, CheckConstraint,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_core.models.base import Base, utcnow
from ledger_core.models.enums import (
    TransactionType,
    TransactionStatus,
    enum_values,
)
from ledger_core.models.types import Money


# Valid state transitions: the source of truth for the state machine
VALID_TRANSITIONS: dict[TransactionStatus, set[TransactionStatus]] = {
    TransactionStatus.PENDING: {
        TransactionStatus.COMPLETED,
        TransactionStatus.FAILED,
    },
    TransactionStatus.COMPLETED: set(),  # Terminal
    TransactionStatus.FAILED: set(),  # Terminal
}


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
        CheckConstraint(
            "source_account_id IS NULL "
            "OR destination_account_id IS NULL "
            "OR source_account_id <> destination_account_id",
            name="ck_transactions_distinct_accounts",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    transaction_type: Mapped[TransactionType] = mapped_column(
        "type",
        SAEnum(
            TransactionType,
            name="transaction_type_enum",
            values_callable=enum_values,
            create_constraint=True,
        ),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    source_account_id: Mapped[int | None] = mapped_column(
        ForeignKey("accounts.id"), nullable=True, index=True
    )
    destination_account_id: Mapped[int | None] = mapped_column(
        ForeignKey("accounts.id"), nullable=True, index=True
    )
    status: Mapped[TransactionStatus] = mapped_column(
        SAEnum(
            TransactionStatus,
            name="transaction_status_enum",
            values_callable=enum_values,
            create_constraint=True,
        ),
        nullable=False,
        default=TransactionStatus.PENDING,
    )
    description: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    entries: Mapped[list["LedgerEntry"]] = relationship(
        back_populates="transaction",
        order_by="LedgerEntry.id",
    )

    def can_transition_to(self, new_status: TransactionStatus) -> bool:
        """Check if a state transition is valid."""
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    @property
    def is_terminal(self) -> bool:
        return not VALID_TRANSITIONS.get(self.status)

    def __repr__(self) -> str:
        return (
            f"<Transaction {self.transaction_type.value} "
            f"{self.amount} {self.currency} ({self.status.value})>"
        )
