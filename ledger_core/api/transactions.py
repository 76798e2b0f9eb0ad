"""
Money movement API endpoints.
"""

from fastapi import APIRouter, Depends

from ledger_core.api.deps import get_ledger
from ledger_core.api.errors import to_http_exception
from ledger_core.exceptions import LedgerError
from ledger_core.schemas.transaction import (
    DepositRequest,
    WithdrawalRequest,
    TransferRequest,
    PostingResponse,
)
from ledger_core.services.ledger_engine import LedgerEngine

router = APIRouter(tags=["Transactions"])


@router.post("/deposits", response_model=PostingResponse, status_code=201)
def deposit(
    request: DepositRequest,
    ledger: LedgerEngine = Depends(get_ledger),
):
    """Deposit money into an account."""
    try:
        return ledger.deposit(
            request.account_id,
            request.amount,
            request.currency,
            request.description,
        )
    except LedgerError as e:
        raise to_http_exception(e)


@router.post("/withdrawals", response_model=PostingResponse, status_code=201)
def withdraw(
    request: WithdrawalRequest,
    ledger: LedgerEngine = Depends(get_ledger),
):
    """Withdraw money from an account. 422 if funds are insufficient."""
    try:
        return ledger.withdraw(
            request.account_id,
            request.amount,
            request.currency,
            request.description,
        )
    except LedgerError as e:
        raise to_http_exception(e)


@router.post("/transfers", response_model=PostingResponse, status_code=201)
def transfer(
    request: TransferRequest,
    ledger: LedgerEngine = Depends(get_ledger),
):
    """Transfer money between two accounts."""
    try:
        return ledger.transfer(
            request.source_account_id,
            request.destination_account_id,
            request.amount,
            request.currency,
            request.description,
        )
    except LedgerError as e:
        raise to_http_exception(e)
