"""Selectors for the books kernel (read side)."""

from books_kernel.selectors.account_selector import AccountRecord, AccountSelector
from books_kernel.selectors.ledger_selector import (
    AccountTotals,
    LedgerEntryRecord,
    LedgerSelector,
)

__all__ = [
    "AccountRecord",
    "AccountSelector",
    "AccountTotals",
    "LedgerEntryRecord",
    "LedgerSelector",
]
