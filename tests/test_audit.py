"""Tests for the audit logger."""

from decimal import Decimal
from uuid import uuid4

import pytest

from ledger_service.audit import AuditLogger
from ledger_service.models.audit import (
    AuditActionType,
    AuditEventBuilder,
    RequestContext,
)
from ledger_service.services.storage import AuditStorageInterface, InMemoryAuditStorage


class FailingAuditStorage(AuditStorageInterface):
    """Audit backend that is always down."""

    async def append_event(self, event):
        raise ConnectionError("audit sheet unreachable")

    async def get_events_by_entity(self, entity_type, entity_id):
        return []

    async def get_recent_events(self, limit=100):
        return []


@pytest.fixture
def context():
    return RequestContext(actor="user-1", origin_address="10.0.0.1", endpoint="POST /lancamentos")


class TestAuditLogger:
    """Detached, never-failing audit writes."""

    @pytest.mark.asyncio
    async def test_log_persists_event(self, context):
        storage = InMemoryAuditStorage()
        audit = AuditLogger(storage)
        event = AuditEventBuilder.system_error("RuntimeError", "boom", context)

        assert await audit.log(event) is True
        assert storage.events == [event]

    @pytest.mark.asyncio
    async def test_log_without_storage_is_local_only(self, context):
        audit = AuditLogger()
        event = AuditEventBuilder.system_error("RuntimeError", "boom", context)
        assert await audit.log(event) is True

    @pytest.mark.asyncio
    async def test_storage_failure_is_counted_not_raised(self, context):
        audit = AuditLogger(FailingAuditStorage())
        event = AuditEventBuilder.system_error("RuntimeError", "boom", context)

        assert await audit.log(event) is False
        assert audit.failed_writes == 1

    @pytest.mark.asyncio
    async def test_record_is_detached_until_drained(self, context):
        storage = InMemoryAuditStorage()
        audit = AuditLogger(storage)
        tx_id = uuid4()

        audit.record_transaction_created(tx_id, "Dízimo", Decimal("100"), context)
        audit.record_transaction_deleted(tx_id, "Dízimo", Decimal("100"), context)
        assert audit.pending_writes == 2

        await audit.drain()

        assert audit.pending_writes == 0
        actions = [e.action_type for e in storage.events]
        assert actions == [AuditActionType.CREATE, AuditActionType.DELETE]

    @pytest.mark.asyncio
    async def test_record_failure_never_reaches_caller(self, context):
        audit = AuditLogger(FailingAuditStorage())
        audit.record_error("RuntimeError", "boom", context)
        await audit.drain()
        assert audit.failed_writes == 1

    def test_record_outside_event_loop(self, context):
        """Scripts without a running loop still get their event written."""
        storage = InMemoryAuditStorage()
        audit = AuditLogger(storage)
        audit.record_report_generated("mensal", "2024-01-01", "2024-02-01", context)

        [event] = storage.events
        assert event.action_type == AuditActionType.REPORT
        assert event.details["period_start"] == "2024-01-01"

    @pytest.mark.asyncio
    async def test_entity_history(self, context):
        storage = InMemoryAuditStorage()
        audit = AuditLogger(storage)
        tx_id = uuid4()

        audit.record_transaction_created(tx_id, "Oferta", Decimal("20"), context)
        audit.record_transaction_updated(tx_id, "Oferta", ["valor"], context)
        audit.record_error("RuntimeError", "unrelated", context)
        await audit.drain()

        history = await storage.get_events_by_entity("transaction", str(tx_id))
        assert [e.action_type for e in history] == [AuditActionType.CREATE, AuditActionType.UPDATE]
        assert history[1].details["changed_fields"] == ["valor"]

        assert len(await storage.get_recent_events(limit=10)) == 3
