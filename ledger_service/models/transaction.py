"""
Core Data Models for the Ledger

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage, logging and the HTTP API

Attribute names are English; the wire format keeps the product's Portuguese
column names through field aliases (tipo, descricao, valor, ...).

DESIGN DECISION: Direction of a movement is carried by `kind`, never by the
sign of `amount`. Amounts are always strictly positive.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, ClassVar, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
)


# JSON clients expect numbers, not strings
Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]

DEFAULT_PAYMENT_METHOD = "dinheiro"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================

class TransactionKind(str, Enum):
    """Receipt or expense. Immutable once a transaction exists."""
    RECEIPT = "receita"
    EXPENSE = "despesa"


class TransactionStatus(str, Enum):
    """
    Lifecycle status.

    CRITICAL: only CONFIRMED transactions participate in balances and reports.
    """
    DRAFT = "rascunho"
    CONFIRMED = "confirmado"
    CANCELLED = "cancelado"


# =============================================================================
# TRANSACTION
# =============================================================================

class Transaction(BaseModel):
    """A single recorded money movement."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID = Field(default_factory=uuid4)
    kind: TransactionKind = Field(..., alias="tipo")
    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
        alias="descricao",
    )
    amount: Money = Field(..., gt=0, decimal_places=2, alias="valor")
    transaction_date: date = Field(default_factory=date.today, alias="data_lancamento")
    due_date: Optional[date] = Field(default=None, alias="data_vencimento")

    # References (owned by the administrative module, read-only here)
    account_id: str = Field(..., min_length=1, alias="conta_id")
    category_id: str = Field(..., min_length=1, alias="categoria_id")
    fund_id: Optional[str] = Field(default=None, alias="fundo_id")
    person_id: Optional[str] = Field(default=None, alias="pessoa_id")

    payment_method: str = Field(
        default=DEFAULT_PAYMENT_METHOD,
        min_length=1,
        max_length=50,
        alias="forma_pagamento",
    )
    document_number: Optional[str] = Field(
        default=None,
        max_length=100,
        alias="numero_documento",
    )
    status: TransactionStatus = Field(default=TransactionStatus.CONFIRMED)
    observations: Optional[str] = Field(
        default=None,
        max_length=2000,
        alias="observacoes",
    )

    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def counts_towards_totals(self) -> bool:
        return self.status == TransactionStatus.CONFIRMED


class TransactionCreate(BaseModel):
    """
    Validated create payload.

    Required-field presence and the `tipo` enum are checked by the
    validator before this model is built, so the caller gets the
    first missing field by name.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
    )

    kind: TransactionKind = Field(..., alias="tipo")
    description: str = Field(..., min_length=1, max_length=500, alias="descricao")
    amount: Decimal = Field(..., gt=0, decimal_places=2, alias="valor")
    transaction_date: Optional[date] = Field(default=None, alias="data_lancamento")
    due_date: Optional[date] = Field(default=None, alias="data_vencimento")
    account_id: str = Field(..., min_length=1, alias="conta_id")
    category_id: str = Field(..., min_length=1, alias="categoria_id")
    fund_id: Optional[str] = Field(default=None, alias="fundo_id")
    person_id: Optional[str] = Field(default=None, alias="pessoa_id")
    payment_method: Optional[str] = Field(default=None, max_length=50, alias="forma_pagamento")
    document_number: Optional[str] = Field(default=None, max_length=100, alias="numero_documento")
    status: Optional[TransactionStatus] = None
    observations: Optional[str] = Field(default=None, max_length=2000, alias="observacoes")


class TransactionUpdate(BaseModel):
    """
    Partial update payload.

    Only the mutable fields are accepted; `tipo`, references and
    audit columns are silently ignored.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
    )

    description: Optional[str] = Field(default=None, min_length=1, max_length=500, alias="descricao")
    amount: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2, alias="valor")
    transaction_date: Optional[date] = Field(default=None, alias="data_lancamento")
    due_date: Optional[date] = Field(default=None, alias="data_vencimento")
    payment_method: Optional[str] = Field(default=None, min_length=1, max_length=50, alias="forma_pagamento")
    document_number: Optional[str] = Field(default=None, max_length=100, alias="numero_documento")
    status: Optional[TransactionStatus] = None
    observations: Optional[str] = Field(default=None, max_length=2000, alias="observacoes")

    # Fields that must never be set to null once a transaction exists
    NON_NULLABLE: ClassVar[tuple[str, ...]] = ("description", "amount", "transaction_date", "payment_method", "status")

    def changes(self) -> dict:
        """Fields explicitly present in the payload, keyed by attribute name."""
        return self.model_dump(exclude_unset=True)


# =============================================================================
# READ VIEWS
# =============================================================================

class ReferenceRef(BaseModel):
    """Display data joined from a reference entity."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = Field(..., alias="nome")
    color: Optional[str] = Field(default=None, alias="cor")


class TransactionView(Transaction):
    """Transaction joined with human-readable reference names."""

    account: Optional[ReferenceRef] = Field(default=None, alias="conta")
    category: Optional[ReferenceRef] = Field(default=None, alias="categoria")
    fund: Optional[ReferenceRef] = Field(default=None, alias="fundo")
    person: Optional[ReferenceRef] = Field(default=None, alias="pessoa")


# =============================================================================
# FILTERS
# =============================================================================

class TransactionFilter(BaseModel):
    """
    Predicate shared by listings, balances and reports.

    Date bounds are half-open: date_from <= transaction_date < date_to.
    """

    kind: Optional[TransactionKind] = None
    status: Optional[TransactionStatus] = None
    category_id: Optional[str] = None
    account_id: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    def matches(self, transaction: Transaction) -> bool:
        if self.kind and transaction.kind != self.kind:
            return False
        if self.status and transaction.status != self.status:
            return False
        if self.category_id and transaction.category_id != self.category_id:
            return False
        if self.account_id and transaction.account_id != self.account_id:
            return False
        if self.date_from and transaction.transaction_date < self.date_from:
            return False
        if self.date_to and transaction.transaction_date >= self.date_to:
            return False
        return True

