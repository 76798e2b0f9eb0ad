"""
Account API endpoints.

The API layer is thin — it handles HTTP concerns (status codes,
response formatting) and delegates everything else to the
LedgerEngine.
"""

from fastapi import APIRouter, Depends

from ledger_core.api.deps import get_ledger
from ledger_core.api.errors import to_http_exception
from ledger_core.exceptions import LedgerError
from ledger_core.schemas.account import (
    AccountOpen,
    AccountResponse,
    AccountBalanceResponse,
)
from ledger_core.schemas.ledger import (
    AccountLedgerResponse,
    LedgerEntryResponse,
)
from ledger_core.services.ledger_engine import LedgerEngine

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.post("", response_model=AccountResponse, status_code=201)
def open_account(
    request: AccountOpen,
    ledger: LedgerEngine = Depends(get_ledger),
):
    """Open a new account. Its balance starts at zero."""
    try:
        return ledger.open_account(
            request.owner_id, request.account_type, request.currency
        )
    except LedgerError as e:
        raise to_http_exception(e)


@router.get("/{account_id}", response_model=AccountBalanceResponse)
def get_account(
    account_id: int,
    ledger: LedgerEngine = Depends(get_ledger),
):
    """
    Get account details with the current balance.

    Balance is calculated from entries, not stored.
    """
    try:
        account, balance = ledger.get_account_with_balance(account_id)
    except LedgerError as e:
        raise to_http_exception(e)

    return AccountBalanceResponse(
        id=account.id,
        owner_id=account.user_id,
        account_type=account.account_type,
        currency=account.currency,
        status=account.status,
        balance=balance,
    )


@router.get("/{account_id}/ledger", response_model=AccountLedgerResponse)
def get_account_ledger(
    account_id: int,
    ledger: LedgerEngine = Depends(get_ledger),
):
    """Get all ledger entries for an account, oldest first."""
    try:
        entries = ledger.list_ledger(account_id)
    except LedgerError as e:
        raise to_http_exception(e)

    return AccountLedgerResponse(
        account_id=account_id,
        entries=[LedgerEntryResponse.model_validate(e) for e in entries],
    )
