"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Backends: in-memory (tests, development), Google Sheets (ledger and audit),
Redis (shared rate-limit counters).
"""

from ledger_service.services.storage.interface import (
    AuditStorageInterface,
    LedgerStorageInterface,
    RateLimitStorageInterface,
    RecordNotFoundError,
    StorageConnectionError,
    StorageError,
)
from ledger_service.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    InMemoryRateLimitStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LedgerStorageInterface",
    "RateLimitStorageInterface",
    # Exceptions
    "RecordNotFoundError",
    "StorageConnectionError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryLedgerStorage",
    "InMemoryRateLimitStorage",
]
