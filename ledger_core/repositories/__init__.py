"""Typed data access for the ledger."""

from ledger_core.repositories.ledger_repository import (
    IllegalStatusTransition,
    LedgerRepository,
)

__all__ = ["IllegalStatusTransition", "LedgerRepository"]
