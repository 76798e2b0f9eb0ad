"""Common FastAPI dependencies for API endpoints."""

from functools import lru_cache

from ledger_core.config import get_settings
from ledger_core.models.base import SessionLocal
from ledger_core.services.ledger_engine import LedgerEngine


@lru_cache()
def get_ledger() -> LedgerEngine:
    """
    Return the process-wide LedgerEngine.

    The engine holds no per-request state, only the session
    factory it opens store transactions from, so one instance
    serves every request.
    """
    settings = get_settings()
    return LedgerEngine(
        SessionLocal,
        lock_timeout_ms=settings.LOCK_TIMEOUT_MS,
        record_failed_attempts=settings.RECORD_FAILED_ATTEMPTS,
    )
