"""
Pydantic schemas for ledger reads.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from ledger_core.models.enums import EntryType


class LedgerEntryResponse(BaseModel):
    """Single entry in API responses."""
    id: int
    transaction_id: int
    entry_type: EntryType
    amount: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}


class AccountLedgerResponse(BaseModel):
    """All entries of one account, oldest first."""
    account_id: int
    entries: list[LedgerEntryResponse]
