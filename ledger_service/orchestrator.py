"""
Main Orchestrator for the Ledger Service

This module ties together all the components and defines the
end-to-end flows behind every ledger endpoint:
1. Read (list with balance, single view, standalone balance)
2. Write (create, update, delete)
3. Report (monthly / yearly summaries)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is written before validation passes
- The audit entry is recorded only after the primary action succeeded
- Audit writes are detached; they never delay or fail the request

Authentication and rate limiting happen before a flow is entered;
the flows receive an already-identified RequestContext.
"""

import math
from dataclasses import dataclass
from typing import Any, Optional

import structlog

from ledger_service.audit import AuditLogger
from ledger_service.auth import IdentityVerifier
from ledger_service.config import get_settings
from ledger_service.ledger import BalanceCalculator, LedgerStore, ReportGenerator
from ledger_service.models.audit import RequestContext
from ledger_service.models.report import (
    BalanceSummary,
    Pagination,
    PeriodReport,
    TransactionPage,
)
from ledger_service.models.transaction import TransactionFilter, TransactionView
from ledger_service.ratelimit import RateLimiter
from ledger_service.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    InMemoryRateLimitStorage,
    LedgerStorageInterface,
    RateLimitStorageInterface,
)
from ledger_service.validation import TransactionValidator


logger = structlog.get_logger("ledger_service.orchestrator")

DELETED_MESSAGE = "Lançamento removido com sucesso"


class LedgerFlow:
    """
    Orchestrates every ledger operation.

    Each write follows: validate -> persist -> audit.
    Reports and single-record views are audited too; plain listings are not.
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[TransactionValidator] = None,
    ):
        self._storage = storage
        self._audit = audit_logger or AuditLogger()
        self.store = LedgerStore(storage, validator or TransactionValidator(storage))
        self.balances = BalanceCalculator(storage)
        self.reports = ReportGenerator(storage)

    async def list_transactions(
        self,
        criteria: TransactionFilter,
        page: int = 1,
        limit: int = 20,
    ) -> TransactionPage:
        """One page plus the balance of the whole filter and pagination info."""
        items, total = await self.store.list(criteria, page=page, limit=limit)
        balance = await self.balances.balance(criteria)
        return TransactionPage(
            data=items,
            balance=balance,
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                total_pages=math.ceil(total / limit) if total else 0,
            ),
        )

    async def get_transaction(
        self,
        transaction_id: str,
        context: RequestContext,
    ) -> TransactionView:
        view = await self.store.get(transaction_id)
        self._audit.record_transaction_viewed(view.id, view.description, context)
        return view

    async def create_transaction(
        self,
        payload: Any,
        context: RequestContext,
    ) -> TransactionView:
        view = await self.store.create(payload, actor=context.actor)
        self._audit.record_transaction_created(
            transaction_id=view.id,
            description=view.description,
            amount=view.amount,
            context=context,
        )
        return view

    async def update_transaction(
        self,
        transaction_id: str,
        payload: Any,
        context: RequestContext,
    ) -> TransactionView:
        view, changed = await self.store.update(transaction_id, payload)
        self._audit.record_transaction_updated(
            transaction_id=view.id,
            description=view.description,
            changed_fields=changed,
            context=context,
        )
        return view

    async def delete_transaction(
        self,
        transaction_id: str,
        context: RequestContext,
    ) -> dict[str, str]:
        snapshot = await self.store.delete(transaction_id)
        self._audit.record_transaction_deleted(
            transaction_id=snapshot.id,
            description=snapshot.description,
            amount=snapshot.amount,
            context=context,
        )
        return {"message": DELETED_MESSAGE}

    async def balance(self, criteria: TransactionFilter) -> BalanceSummary:
        return await self.balances.balance(criteria)

    async def report(
        self,
        context: RequestContext,
        report_type: str = "mensal",
        month: Optional[str] = None,
        year: Optional[str] = None,
    ) -> PeriodReport:
        report = await self.reports.report(report_type=report_type, month=month, year=year)
        self._audit.record_report_generated(
            report_type=report_type,
            period_start=report.period.start.isoformat(),
            period_end=report.period.end.isoformat(),
            context=context,
        )
        return report


@dataclass
class LedgerComponents:
    """Everything the HTTP layer needs, wired once per process."""

    flow: LedgerFlow
    verifier: IdentityVerifier
    rate_limiter: RateLimiter
    audit_logger: AuditLogger


def _build_storage(backend: str) -> tuple[LedgerStorageInterface, AuditStorageInterface]:
    if backend == "google_sheets":
        from ledger_service.services.storage.google_sheets import (
            GoogleSheetsAuditStorage,
            GoogleSheetsClient,
            GoogleSheetsLedgerStorage,
        )
        client = GoogleSheetsClient()
        return GoogleSheetsLedgerStorage(client), GoogleSheetsAuditStorage(client)
    return InMemoryLedgerStorage(), InMemoryAuditStorage()


def _build_rate_limit_storage(backend: str) -> RateLimitStorageInterface:
    if backend == "redis":
        from ledger_service.services.storage.redis_store import RedisRateLimitStorage
        return RedisRateLimitStorage()
    return InMemoryRateLimitStorage()


def create_app_components(
    ledger_storage: Optional[LedgerStorageInterface] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
    rate_limit_storage: Optional[RateLimitStorageInterface] = None,
    verifier: Optional[IdentityVerifier] = None,
) -> LedgerComponents:
    """
    Factory function to create all application components.

    Anything not passed in is built from settings: the storage backend
    (memory or google_sheets), the rate-limit backend (memory or redis)
    and the identity verifier.

    Returns:
        LedgerComponents
    """
    settings = get_settings()

    if ledger_storage is None or audit_storage is None:
        default_ledger, default_audit = _build_storage(settings.app.storage_backend)
        ledger_storage = ledger_storage or default_ledger
        audit_storage = audit_storage or default_audit

    if rate_limit_storage is None:
        rate_limit_storage = _build_rate_limit_storage(settings.rate_limit.backend)

    audit_logger = AuditLogger(audit_storage)
    rate_limiter = RateLimiter(
        rate_limit_storage,
        max_requests=settings.rate_limit.max_requests,
        window_seconds=settings.rate_limit.window_seconds,
    )

    logger.info(
        "components_created",
        storage_backend=type(ledger_storage).__name__,
        rate_limit_backend=type(rate_limit_storage).__name__,
    )

    return LedgerComponents(
        flow=LedgerFlow(ledger_storage, audit_logger=audit_logger),
        verifier=verifier or IdentityVerifier.from_settings(),
        rate_limiter=rate_limiter,
        audit_logger=audit_logger,
    )
