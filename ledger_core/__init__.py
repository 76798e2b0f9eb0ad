"""Double-entry ledger with derived balances."""
