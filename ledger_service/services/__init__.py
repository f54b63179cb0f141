"""Services package."""

from ledger_service.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    InMemoryRateLimitStorage,
    LedgerStorageInterface,
    RateLimitStorageInterface,
    RecordNotFoundError,
    StorageConnectionError,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryLedgerStorage",
    "InMemoryRateLimitStorage",
    "LedgerStorageInterface",
    "RateLimitStorageInterface",
    "RecordNotFoundError",
    "StorageConnectionError",
    "StorageError",
]
