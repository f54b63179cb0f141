"""Payload validation package."""

from ledger_service.validation.validator import (
    REQUIRED_CREATE_FIELDS,
    TransactionValidator,
    ValidationIssue,
)

__all__ = ["REQUIRED_CREATE_FIELDS", "TransactionValidator", "ValidationIssue"]
