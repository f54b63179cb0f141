"""
In-Memory Storage Implementation

Used by the test-suite and for local development without a spreadsheet.
State lives in this process only; the rate-limit counter here is NOT
suitable for deployments with more than one handler process.
"""

import threading
from typing import Optional
from uuid import UUID

from ledger_service.models.audit import AuditEvent
from ledger_service.models.reference import Account, Category, Fund, Person
from ledger_service.models.transaction import Transaction, TransactionFilter
from ledger_service.services.storage.interface import (
    AuditStorageInterface,
    LedgerStorageInterface,
    RateLimitStorageInterface,
    RecordNotFoundError,
)


class InMemoryLedgerStorage(LedgerStorageInterface):
    """Dict-backed ledger. Copies are stored so callers can't mutate state."""

    def __init__(self):
        self._transactions: dict[UUID, Transaction] = {}
        self._accounts: dict[str, Account] = {}
        self._categories: dict[str, Category] = {}
        self._funds: dict[str, Fund] = {}
        self._people: dict[str, Person] = {}

    # Reference data is owned elsewhere; these seed it.

    def add_account(self, account: Account) -> None:
        self._accounts[account.id] = account

    def add_category(self, category: Category) -> None:
        self._categories[category.id] = category

    def add_fund(self, fund: Fund) -> None:
        self._funds[fund.id] = fund

    def add_person(self, person: Person) -> None:
        self._people[person.id] = person

    async def insert_transaction(self, transaction: Transaction) -> None:
        self._transactions[transaction.id] = transaction.model_copy(deep=True)

    async def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        found = self._transactions.get(transaction_id)
        return found.model_copy(deep=True) if found else None

    async def replace_transaction(self, transaction: Transaction) -> None:
        if transaction.id not in self._transactions:
            raise RecordNotFoundError(f"Transaction not found: {transaction.id}")
        self._transactions[transaction.id] = transaction.model_copy(deep=True)

    async def delete_transaction(self, transaction_id: UUID) -> bool:
        return self._transactions.pop(transaction_id, None) is not None

    async def find_transactions(
        self,
        criteria: TransactionFilter,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> tuple[list[Transaction], int]:
        matches = [t for t in self._transactions.values() if criteria.matches(t)]
        matches.sort(key=lambda t: (t.transaction_date, t.created_at), reverse=True)

        total = len(matches)
        end = None if limit is None else offset + limit
        return [t.model_copy(deep=True) for t in matches[offset:end]], total

    async def get_account(self, account_id: str) -> Optional[Account]:
        return self._accounts.get(account_id)

    async def get_category(self, category_id: str) -> Optional[Category]:
        return self._categories.get(category_id)

    async def get_fund(self, fund_id: str) -> Optional[Fund]:
        return self._funds.get(fund_id)

    async def get_person(self, person_id: str) -> Optional[Person]:
        return self._people.get(person_id)


class InMemoryAuditStorage(AuditStorageInterface):
    """List-backed append-only audit log."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        events = [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        events = sorted(self._events, key=lambda e: e.timestamp, reverse=True)
        return events[:limit]


class InMemoryRateLimitStorage(RateLimitStorageInterface):
    """Process-local window counters guarded by a lock."""

    def __init__(self):
        self._windows: dict[str, tuple[float, int]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str, now: float, window_seconds: float) -> tuple[float, int]:
        with self._lock:
            window_start, count = self._windows.get(key, (now, 0))
            if now - window_start >= window_seconds:
                window_start, count = now, 0
            count += 1
            self._windows[key] = (window_start, count)
            return window_start, count

    def clear(self) -> None:
        with self._lock:
            self._windows.clear()
