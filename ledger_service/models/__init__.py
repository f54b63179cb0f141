"""
Data Models Package

This package contains all Pydantic models used in the ledger service.
All data flowing through the system must conform to these schemas.
"""

from ledger_service.models.transaction import (
    DEFAULT_PAYMENT_METHOD,
    Money,
    ReferenceRef,
    Transaction,
    TransactionCreate,
    TransactionFilter,
    TransactionKind,
    TransactionStatus,
    TransactionUpdate,
    TransactionView,
)
from ledger_service.models.reference import (
    NEUTRAL_COLOR,
    Account,
    Category,
    Fund,
    Person,
)
from ledger_service.models.report import (
    BalanceSummary,
    CategoryTotal,
    Pagination,
    PeriodReport,
    ReportPeriod,
    TransactionPage,
)
from ledger_service.models.audit import (
    AuditActionType,
    AuditEvent,
    AuditEventBuilder,
    AuditLevel,
    RequestContext,
)

__all__ = [
    # Transaction models
    "DEFAULT_PAYMENT_METHOD",
    "Money",
    "ReferenceRef",
    "Transaction",
    "TransactionCreate",
    "TransactionFilter",
    "TransactionKind",
    "TransactionStatus",
    "TransactionUpdate",
    "TransactionView",
    # Reference entities
    "NEUTRAL_COLOR",
    "Account",
    "Category",
    "Fund",
    "Person",
    # Aggregations
    "BalanceSummary",
    "CategoryTotal",
    "Pagination",
    "PeriodReport",
    "ReportPeriod",
    "TransactionPage",
    # Audit models
    "AuditActionType",
    "AuditEvent",
    "AuditEventBuilder",
    "AuditLevel",
    "RequestContext",
]
