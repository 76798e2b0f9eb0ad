"""
Mapping from ledger errors to HTTP responses.
"""

import logging

from fastapi import HTTPException

from ledger_core.exceptions import (
    AccountNotFound,
    Conflict,
    InsufficientFunds,
    InvalidInput,
    LedgerError,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)

STATUS_CODES: dict[type[LedgerError], int] = {
    InvalidInput: 400,
    AccountNotFound: 404,
    Conflict: 409,
    InsufficientFunds: 422,
    StoreUnavailable: 503,
}


def to_http_exception(exc: LedgerError) -> HTTPException:
    """Translate a ledger error raised by the engine."""
    status_code = next(
        (code for cls, code in STATUS_CODES.items() if isinstance(exc, cls)),
        500,
    )
    if status_code >= 500:
        logger.error("Ledger operation failed: %s", exc, exc_info=exc)
    return HTTPException(status_code=status_code, detail=str(exc))
