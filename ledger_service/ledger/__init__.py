"""
Ledger Core

CRUD, balances and period reports over the transaction store.
"""

from ledger_service.ledger.balance import BalanceCalculator, summarize
from ledger_service.ledger.reports import (
    MONTHLY,
    UNCATEGORIZED,
    YEARLY,
    ReportGenerator,
    month_bounds,
    year_bounds,
)
from ledger_service.ledger.store import LedgerStore, parse_transaction_id

__all__ = [
    "BalanceCalculator",
    "LedgerStore",
    "MONTHLY",
    "ReportGenerator",
    "UNCATEGORIZED",
    "YEARLY",
    "month_bounds",
    "parse_transaction_id",
    "summarize",
    "year_bounds",
]
