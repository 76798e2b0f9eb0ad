"""
Pydantic schemas for money operations.

Requests are parsed into these typed models before anything
reaches the LedgerEngine. Amounts are Decimals with at most
two decimal places; floats in the JSON body are converted by
pydantic from their textual form.
"""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator

from ledger_core.models.enums import TransactionStatus, TransactionType
from ledger_core.models.types import MAX_AMOUNT


class _MoneyRequest(BaseModel):
    amount: Decimal = Field(gt=0, le=MAX_AMOUNT, decimal_places=2, max_digits=19)
    currency: str = Field(min_length=3, max_length=3)
    description: str | None = Field(default=None, max_length=255)

    @field_validator("currency")
    @classmethod
    def currency_is_alpha(cls, v: str) -> str:
        if not v.isascii() or not v.isalpha():
            raise ValueError("currency must be a 3-letter code")
        return v.upper()


class DepositRequest(_MoneyRequest):
    account_id: int = Field(gt=0)


class WithdrawalRequest(_MoneyRequest):
    account_id: int = Field(gt=0)


class TransferRequest(_MoneyRequest):
    source_account_id: int = Field(gt=0)
    destination_account_id: int = Field(gt=0)

    @model_validator(mode="after")
    def accounts_must_differ(self):
        if self.source_account_id == self.destination_account_id:
            raise ValueError(
                "source and destination accounts must be different"
            )
        return self


class PostingResponse(BaseModel):
    """Result of a deposit, withdrawal or transfer."""
    transaction_id: int
    transaction_type: TransactionType
    status: TransactionStatus
    amount: Decimal
    currency: str
    account_id: int
    balance: Decimal
    counterparty_account_id: int | None = None

    model_config = {"from_attributes": True}
