"""
Period Reports

Profit/loss summary for a calendar month or year, grouped by category.

Periods are half-open [start, end): a monthly report for 2024-01 covers
2024-01-01 up to, but not including, 2024-02-01. The same bounds fed to
BalanceCalculator give the same totals.
"""

import re
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from ledger_service.errors import ValidationError
from ledger_service.ledger.balance import summarize
from ledger_service.models.reference import NEUTRAL_COLOR
from ledger_service.models.report import CategoryTotal, PeriodReport, ReportPeriod
from ledger_service.models.transaction import TransactionFilter, TransactionStatus
from ledger_service.services.storage import LedgerStorageInterface


MONTHLY = "mensal"
YEARLY = "anual"
UNCATEGORIZED = "Sem categoria"

_MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")
_YEAR_PATTERN = re.compile(r"^\d{4}$")


def month_bounds(month: str) -> tuple[date, date]:
    """'YYYY-MM' -> (first day of month, first day of next month)."""
    match = _MONTH_PATTERN.match(month or "")
    if not match:
        raise ValidationError("Mês inválido, use o formato YYYY-MM", field="mes")
    year, number = int(match.group(1)), int(match.group(2))
    if not 1 <= number <= 12:
        raise ValidationError("Mês inválido, use o formato YYYY-MM", field="mes")
    start = date(year, number, 1)
    end = date(year + 1, 1, 1) if number == 12 else date(year, number + 1, 1)
    return start, end


def year_bounds(year: str) -> tuple[date, date]:
    if not _YEAR_PATTERN.match(year or "") or int(year) < 1:
        raise ValidationError("Ano inválido, use o formato YYYY", field="ano")
    return date(int(year), 1, 1), date(int(year) + 1, 1, 1)


class ReportGenerator:
    """Builds PeriodReports from confirmed transactions."""

    def __init__(self, storage: LedgerStorageInterface):
        self._storage = storage

    def resolve_period(
        self,
        report_type: str = MONTHLY,
        month: Optional[str] = None,
        year: Optional[str] = None,
        today: Optional[date] = None,
    ) -> tuple[date, date]:
        today = today or date.today()
        if report_type == MONTHLY:
            return month_bounds(month or today.strftime("%Y-%m"))
        if report_type == YEARLY:
            return year_bounds(year or str(today.year))
        raise ValidationError(
            f"Tipo de relatório inválido: {report_type}",
            field="tipo",
        )

    async def report(
        self,
        report_type: str = MONTHLY,
        month: Optional[str] = None,
        year: Optional[str] = None,
        today: Optional[date] = None,
    ) -> PeriodReport:
        """
        Totals and per-category breakdown for one period.

        Args:
            report_type: 'mensal' (default) or 'anual'
            month: 'YYYY-MM' for monthly reports, defaults to the current month
            year: 'YYYY' for yearly reports, defaults to the current year

        Raises:
            ValidationError: malformed period or unknown report type
        """
        start, end = self.resolve_period(report_type, month, year, today)

        transactions, _ = await self._storage.find_transactions(
            TransactionFilter(
                status=TransactionStatus.CONFIRMED,
                date_from=start,
                date_to=end,
            ),
            limit=None,
        )

        categories: dict[str, CategoryTotal] = {}
        names: dict[str, tuple[str, str]] = {}
        for tx in transactions:
            if tx.category_id not in names:
                category = await self._storage.get_category(tx.category_id)
                names[tx.category_id] = (
                    (category.name, category.color) if category
                    else (UNCATEGORIZED, NEUTRAL_COLOR)
                )
            name, color = names[tx.category_id]
            bucket = categories.setdefault(
                name, CategoryTotal(amount=Decimal("0"), color=color)
            )
            bucket.amount += tx.amount

        return PeriodReport(
            report_type=report_type,
            period=ReportPeriod(start=start, end=end),
            summary=summarize(transactions),
            categories=categories,
            generated_at=datetime.now(timezone.utc),
        )
