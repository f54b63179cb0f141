"""
Aggregation Models

Results of the balance calculator and the report generator.
These are derived data: never persisted, always recomputed from
the ledger on demand.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from ledger_service.models.transaction import Money, TransactionView


class BalanceSummary(BaseModel):
    """Receipts, expenses and net balance over confirmed transactions."""

    model_config = ConfigDict(populate_by_name=True)

    receipts: Money = Field(default=Decimal("0"), alias="receitas")
    expenses: Money = Field(default=Decimal("0"), alias="despesas")
    balance: Money = Field(default=Decimal("0"), alias="saldo")


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1, le=100)
    total: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0, alias="totalPages")


class TransactionPage(BaseModel):
    """List response envelope: one page plus the balance of the whole filter."""

    model_config = ConfigDict(populate_by_name=True)

    data: list[TransactionView]
    balance: BalanceSummary = Field(..., alias="saldo")
    pagination: Pagination


class CategoryTotal(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    amount: Money = Field(default=Decimal("0"), alias="valor")
    color: str = Field(..., alias="cor")


class ReportPeriod(BaseModel):
    """Half-open date range [start, end)."""

    model_config = ConfigDict(populate_by_name=True)

    start: date = Field(..., alias="inicio")
    end: date = Field(..., alias="fim")


class PeriodReport(BaseModel):
    """Category-grouped profit/loss summary for one period."""

    model_config = ConfigDict(populate_by_name=True)

    report_type: str = Field(..., alias="tipo")
    period: ReportPeriod = Field(..., alias="periodo")
    summary: BalanceSummary = Field(..., alias="resumo")
    categories: dict[str, CategoryTotal] = Field(default_factory=dict, alias="categorias")
    generated_at: datetime = Field(..., alias="gerado_em")

    @property
    def total_receipts(self) -> Decimal:
        return self.summary.receipts

    @property
    def total_expenses(self) -> Decimal:
        return self.summary.expenses

    @property
    def net_balance(self) -> Decimal:
        return self.summary.balance
