"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for a relational database later
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

The interface is intentionally simple - we're not building a full ORM.
Just the operations the ledger needs.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from ledger_service.models.audit import AuditEvent
from ledger_service.models.reference import Account, Category, Fund, Person
from ledger_service.models.transaction import Transaction, TransactionFilter


class LedgerStorageInterface(ABC):
    """
    Abstract interface for transaction storage.

    Reference entities (accounts, categories, funds, people) are only read.
    """

    @abstractmethod
    async def insert_transaction(self, transaction: Transaction) -> None:
        """
        Persist a new transaction.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        """Return the transaction, or None if it does not exist."""
        pass

    @abstractmethod
    async def replace_transaction(self, transaction: Transaction) -> None:
        """
        Overwrite an existing transaction with the given state.

        Raises:
            RecordNotFoundError: If the transaction doesn't exist
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: UUID) -> bool:
        """
        Permanently remove a transaction.

        Returns:
            True if a row was removed, False if none matched
        """
        pass

    @abstractmethod
    async def find_transactions(
        self,
        criteria: TransactionFilter,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> tuple[list[Transaction], int]:
        """
        Find transactions matching the filter.

        Results are ordered by transaction date, most recent first.

        Args:
            criteria: Predicate to apply
            limit: Page size, or None for every match
            offset: Number of matches to skip

        Returns:
            (page_of_transactions, total_matching_count)
        """
        pass

    @abstractmethod
    async def get_account(self, account_id: str) -> Optional[Account]:
        pass

    @abstractmethod
    async def get_category(self, category_id: str) -> Optional[Category]:
        pass

    @abstractmethod
    async def get_fund(self, fund_id: str) -> Optional[Fund]:
        pass

    @abstractmethod
    async def get_person(self, person_id: str) -> Optional[Person]:
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully

        Raises:
            StorageError: If the backend is unreachable
        """
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """Events for one entity, in chronological order."""
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """The most recent events, newest first."""
        pass


class RateLimitStorageInterface(ABC):
    """
    Counter store for fixed-window rate limiting.

    Implementations used with more than one handler process MUST be
    shared between them (e.g. Redis), otherwise each process counts
    its own requests only.
    """

    @abstractmethod
    def hit(self, key: str, now: float, window_seconds: float) -> tuple[float, int]:
        """
        Count one request against the key's current window.

        Opens a new window starting at `now` when the previous one is
        older than `window_seconds`.

        Returns:
            (window_start, count_including_this_request)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class RecordNotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
