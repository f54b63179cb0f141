"""Audit logging package."""

from ledger_service.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
