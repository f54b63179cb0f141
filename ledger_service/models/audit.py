"""
Audit Models for the Ledger Service

Every significant action in the system is logged for audit purposes.
This provides:
1. Complete traceability of who changed which transaction
2. Debugging information when things go wrong
3. Accountability for the church's finances

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


AUDIT_SOURCE = "api_financeiro"
DESCRIPTION_LIMIT = 500


class AuditActionType(str, Enum):
    """What kind of operation produced the event."""
    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    REPORT = "report"
    ERROR = "error"


class AuditLevel(str, Enum):
    """Severity level for audit events."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every mutation, report and internal failure creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Who
    actor: Optional[str] = Field(
        default=None,
        description="Authenticated user id, or None for anonymous/system"
    )

    # Classification
    action_type: AuditActionType = Field(
        ...,
        description="Type of operation"
    )
    level: AuditLevel = Field(
        default=AuditLevel.INFO,
        description="Event severity"
    )

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'report')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=DESCRIPTION_LIMIT,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Request context
    origin_address: str = Field(default="unknown")
    user_agent: Optional[str] = None

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "actor": self.actor,
            "action_type": self.action_type.value,
            "level": self.level.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "origin_address": self.origin_address,
            "user_agent": self.user_agent,
            "error_message": self.error_message,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, actor, action_type, level, entity_type, entity_id,
         description, details_json, origin_address, user_agent, error_message]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.actor or "",
            self.action_type.value,
            self.level.value,
            self.entity_type or "",
            self.entity_id or "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.origin_address,
            self.user_agent or "",
            self.error_message or "",
        ]


class RequestContext(BaseModel):
    """Who is calling and from where. Attached to every audit event."""

    actor: Optional[str] = None
    origin_address: str = "unknown"
    user_agent: Optional[str] = None
    endpoint: Optional[str] = None


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_created(tx_id, "Dízimo", amount, ctx)
        event = AuditEventBuilder.system_error("KeyError", "boom", ctx)
    """

    @staticmethod
    def _base(context: RequestContext, **kwargs) -> AuditEvent:
        details = {"source": AUDIT_SOURCE}
        if context.endpoint:
            details["endpoint"] = context.endpoint
        details.update(kwargs.pop("details", {}))
        description = kwargs.pop("description")
        if len(description) > DESCRIPTION_LIMIT:
            description = description[:DESCRIPTION_LIMIT - 3] + "..."
        return AuditEvent(
            description=description,
            actor=context.actor,
            origin_address=context.origin_address,
            user_agent=context.user_agent,
            details=details,
            **kwargs,
        )

    @staticmethod
    def transaction_viewed(
        transaction_id: UUID,
        description: str,
        context: RequestContext,
    ) -> AuditEvent:
        return AuditEventBuilder._base(
            context,
            action_type=AuditActionType.VIEW,
            entity_type="transaction",
            entity_id=str(transaction_id),
            description=f"Lançamento visualizado: {description}",
        )

    @staticmethod
    def transaction_created(
        transaction_id: UUID,
        description: str,
        amount: Decimal,
        context: RequestContext,
    ) -> AuditEvent:
        return AuditEventBuilder._base(
            context,
            action_type=AuditActionType.CREATE,
            entity_type="transaction",
            entity_id=str(transaction_id),
            description=f"Novo lançamento criado: {description} - R$ {amount}",
            details={"amount": str(amount)},
        )

    @staticmethod
    def transaction_updated(
        transaction_id: UUID,
        description: str,
        changed_fields: list[str],
        context: RequestContext,
    ) -> AuditEvent:
        return AuditEventBuilder._base(
            context,
            action_type=AuditActionType.UPDATE,
            entity_type="transaction",
            entity_id=str(transaction_id),
            description=f"Lançamento atualizado: {description}",
            details={"changed_fields": changed_fields},
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: UUID,
        description: str,
        amount: Decimal,
        context: RequestContext,
    ) -> AuditEvent:
        return AuditEventBuilder._base(
            context,
            action_type=AuditActionType.DELETE,
            entity_type="transaction",
            entity_id=str(transaction_id),
            description=f"Lançamento removido: {description} - R$ {amount}",
            details={"amount": str(amount)},
        )

    @staticmethod
    def report_generated(
        report_type: str,
        period_start: str,
        period_end: str,
        context: RequestContext,
    ) -> AuditEvent:
        return AuditEventBuilder._base(
            context,
            action_type=AuditActionType.REPORT,
            entity_type="report",
            description=f"Relatório financeiro gerado: {report_type}",
            details={"period_start": period_start, "period_end": period_end},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        context: RequestContext,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEventBuilder._base(
            context,
            action_type=AuditActionType.ERROR,
            level=AuditLevel.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
