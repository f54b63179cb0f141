"""
Audit Logger

DESIGN DECISION: Every mutation, report and internal failure is logged.
This provides:
1. Complete traceability of the church's money movements
2. Debugging capability
3. Accountability for treasurers

The audit logger:
- Writes on a detached asyncio task, so the request never waits for it
- Never raises into the caller (a failed write is counted and logged locally)
- Mirrors every event on the structured process log
"""

import asyncio
import logging
import sys
from decimal import Decimal
from typing import Optional
from uuid import UUID

import structlog

from ledger_service.models.audit import AuditEvent, AuditEventBuilder, RequestContext
from ledger_service.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(debug: bool = False) -> None:
    """Route stdlib logging (and therefore structlog) to stdout."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if debug else logging.INFO,
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence and treasurer visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("ledger_service.audit")
        self._pending: set[asyncio.Task] = set()
        self.failed_writes = 0

    @property
    def pending_writes(self) -> int:
        return len(self._pending)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event and wait for the write.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.level.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.level.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Counted and logged, never raised
                self.failed_writes += 1
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                    failed_writes=self.failed_writes,
                )
                return False

        return True

    def record(self, event: AuditEvent) -> None:
        """
        Log an audit event without waiting for it.

        The write runs on its own task; its latency or failure can
        never delay or fail the operation that produced the event.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Called outside an event loop (scripts, sync tests)
            asyncio.run(self.log(event))
            return

        task = loop.create_task(self.log(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for every detached write started so far (used at shutdown)."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def record_transaction_viewed(
        self,
        transaction_id: UUID,
        description: str,
        context: RequestContext,
    ) -> None:
        self.record(AuditEventBuilder.transaction_viewed(
            transaction_id=transaction_id,
            description=description,
            context=context,
        ))

    def record_transaction_created(
        self,
        transaction_id: UUID,
        description: str,
        amount: Decimal,
        context: RequestContext,
    ) -> None:
        self.record(AuditEventBuilder.transaction_created(
            transaction_id=transaction_id,
            description=description,
            amount=amount,
            context=context,
        ))

    def record_transaction_updated(
        self,
        transaction_id: UUID,
        description: str,
        changed_fields: list[str],
        context: RequestContext,
    ) -> None:
        self.record(AuditEventBuilder.transaction_updated(
            transaction_id=transaction_id,
            description=description,
            changed_fields=changed_fields,
            context=context,
        ))

    def record_transaction_deleted(
        self,
        transaction_id: UUID,
        description: str,
        amount: Decimal,
        context: RequestContext,
    ) -> None:
        self.record(AuditEventBuilder.transaction_deleted(
            transaction_id=transaction_id,
            description=description,
            amount=amount,
            context=context,
        ))

    def record_report_generated(
        self,
        report_type: str,
        period_start: str,
        period_end: str,
        context: RequestContext,
    ) -> None:
        self.record(AuditEventBuilder.report_generated(
            report_type=report_type,
            period_start=period_start,
            period_end=period_end,
            context=context,
        ))

    def record_error(
        self,
        error_type: str,
        error_message: str,
        context: RequestContext,
        details: Optional[dict] = None,
    ) -> None:
        self.record(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            context=context,
            details=details,
        ))
