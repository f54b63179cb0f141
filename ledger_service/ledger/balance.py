"""
Balance Calculator

Receipts, expenses and net balance over every transaction matching a
filter, across all pages. Only confirmed transactions count; drafts and
cancelled entries are listed but never summed.
"""

from decimal import Decimal

from ledger_service.models.report import BalanceSummary
from ledger_service.models.transaction import Transaction, TransactionFilter, TransactionKind
from ledger_service.services.storage import LedgerStorageInterface


def summarize(transactions: list[Transaction]) -> BalanceSummary:
    receipts = Decimal("0")
    expenses = Decimal("0")
    for tx in transactions:
        if not tx.counts_towards_totals:
            continue
        if tx.kind == TransactionKind.RECEIPT:
            receipts += tx.amount
        else:
            expenses += tx.amount
    return BalanceSummary(receipts=receipts, expenses=expenses, balance=receipts - expenses)


class BalanceCalculator:
    def __init__(self, storage: LedgerStorageInterface):
        self._storage = storage

    async def balance(self, criteria: TransactionFilter) -> BalanceSummary:
        """Totals for the full match set of `criteria`, ignoring pagination."""
        transactions, _ = await self._storage.find_transactions(criteria, limit=None)
        return summarize(transactions)
