"""
Error Taxonomy

Every failure a caller can observe belongs to exactly one ErrorKind.
Components raise a LedgerError subclass tagged with its kind; the API
layer maps kinds to HTTP status codes in a single table.

Anything that is NOT a LedgerError is, by definition, an internal failure.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Closed set of failure categories."""
    UNAUTHENTICATED = "unauthenticated"
    RATE_LIMITED = "rate_limited"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


class LedgerError(Exception):
    """Base class for all expected ledger failures."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict[str, Any]:
        """Body returned to the caller."""
        return {"error": self.message, "code": self.kind.value}


class ValidationError(LedgerError):
    """Payload or query parameter rejected before any side effect."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_response(self) -> dict[str, Any]:
        body = super().to_response()
        if self.field:
            body["field"] = self.field
        return body


class NotFoundError(LedgerError):
    """Unknown transaction id."""

    kind = ErrorKind.NOT_FOUND


class UnauthenticatedError(LedgerError):
    """Missing or invalid bearer credential."""

    kind = ErrorKind.UNAUTHENTICATED


class RateLimitedError(LedgerError):
    """Origin exceeded its request ceiling for the current window."""

    kind = ErrorKind.RATE_LIMITED

    def __init__(self, message: str, retry_after: int):
        super().__init__(message)
        self.retry_after = retry_after


class InternalError(LedgerError):
    """Unexpected failure. Detail is never returned to the caller."""

    kind = ErrorKind.INTERNAL
