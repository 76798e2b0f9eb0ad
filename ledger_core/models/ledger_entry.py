"""
Ledger entry model.

Each entry is one leg of a transaction: a debit or a credit
of a positive amount against one account. Entries are
immutable — once posted, they are never modified or deleted.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    DateTime, ForeignKey, CheckConstraint, Index,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_core.models.base import Base, utcnow
from ledger_core.models.enums import EntryType, enum_values
from ledger_core.models.types import Money


class LedgerEntry(Base):
    """
    An immutable debit or credit entry in the ledger.

    The balance of an account is the sum of its credit
    amounts minus the sum of its debit amounts. The rules
    about how many entries each transaction gets are enforced
    by the LedgerEngine, not by the model.
    """

    __tablename__ = "ledger_entries"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_ledger_entries_amount_positive"),
        # Ledger listing order: creation time, then id
        Index("ix_ledger_entries_account_created", "account_id", "created_at", "id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    transaction_id: Mapped[int] = mapped_column(
        ForeignKey("transactions.id"), nullable=False, index=True
    )
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False
    )
    entry_type: Mapped[EntryType] = mapped_column(
        SAEnum(
            EntryType,
            name="entry_type_enum",
            values_callable=enum_values,
            create_constraint=True,
        ),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    transaction: Mapped["Transaction"] = relationship(
        back_populates="entries"
    )

    def __repr__(self) -> str:
        return f"<LedgerEntry {self.entry_type.value} {self.amount}>"
