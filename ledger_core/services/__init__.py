"""Business logic services."""

from ledger_core.services.ledger_engine import LedgerEngine, PostingResult

__all__ = ["LedgerEngine", "PostingResult"]
