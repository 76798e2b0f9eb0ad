"""
Pydantic schemas for account operations.
"""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from ledger_core.models.enums import AccountStatus


class AccountOpen(BaseModel):
    """Request to open a new account."""
    owner_id: int = Field(gt=0)
    account_type: str = Field(min_length=1, max_length=50)
    currency: str = Field(min_length=3, max_length=3)

    @field_validator("account_type")
    @classmethod
    def account_type_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("account_type must not be blank")
        return v.strip()

    @field_validator("currency")
    @classmethod
    def currency_is_alpha(cls, v: str) -> str:
        if not v.isascii() or not v.isalpha():
            raise ValueError("currency must be a 3-letter code")
        return v.upper()


class AccountResponse(BaseModel):
    id: int
    owner_id: int = Field(validation_alias="user_id")
    account_type: str
    currency: str
    status: AccountStatus

    model_config = {"from_attributes": True, "populate_by_name": True}


class AccountBalanceResponse(AccountResponse):
    """Account details plus the balance derived from its ledger."""
    balance: Decimal
