"""
Account model.

An account is a named holder of funds. It deliberately has
no balance column: the balance is always derived from the
account's ledger entries, so there is nothing that can drift
out of sync with the ledger.
"""

from sqlalchemy import String, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from ledger_core.models.base import Base
from ledger_core.models.enums import AccountStatus, enum_values


class Account(Base):
    """
    A holder of funds owned by a user.

    Once referenced by a ledger entry, an account is never
    deleted. Only its status may change.
    """

    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(nullable=False, index=True)
    # Free-form classification, e.g. "checking" or "savings"
    account_type: Mapped[str] = mapped_column(
        "type", String(50), nullable=False
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    status: Mapped[AccountStatus] = mapped_column(
        SAEnum(
            AccountStatus,
            name="account_status_enum",
            values_callable=enum_values,
            create_constraint=True,
        ),
        nullable=False,
        default=AccountStatus.ACTIVE,
    )

    def __repr__(self) -> str:
        return (
            f"<Account {self.id} {self.account_type} "
            f"{self.currency} ({self.status.value})>"
        )
