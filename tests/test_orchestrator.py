"""Tests for component wiring from settings."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from ledger_service.models import TransactionFilter
from ledger_service.orchestrator import create_app_components
from ledger_service.services.storage import (
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    InMemoryRateLimitStorage,
)

from tests.conftest import JWT_SECRET, make_token


@pytest.fixture
def auth_env(monkeypatch):
    monkeypatch.setenv("AUTH_JWT_SECRET", JWT_SECRET)
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.setenv("RATE_LIMIT_BACKEND", "memory")


class TestCreateAppComponents:

    def test_memory_backends_from_settings(self, auth_env):
        components = create_app_components()

        assert isinstance(components.rate_limiter._storage, InMemoryRateLimitStorage)
        assert components.verifier.verify(make_token()).user_id == "user-1"
        assert components.audit_logger.failed_writes == 0

    def test_rate_limit_settings_are_applied(self, auth_env, monkeypatch):
        monkeypatch.setenv("RATE_LIMIT_MAX_REQUESTS", "5")
        monkeypatch.setenv("RATE_LIMIT_WINDOW_SECONDS", "10")
        components = create_app_components()

        assert components.rate_limiter.max_requests == 5
        assert components.rate_limiter.window_seconds == 10

    @pytest.mark.asyncio
    async def test_injected_storage_is_used(self, auth_env):
        ledger = InMemoryLedgerStorage()
        audit = InMemoryAuditStorage()
        components = create_app_components(ledger_storage=ledger, audit_storage=audit)

        page = await components.flow.list_transactions(TransactionFilter())
        assert page.pagination.total == 0

    def test_missing_secret_fails_fast(self, monkeypatch):
        monkeypatch.delenv("AUTH_JWT_SECRET", raising=False)
        with pytest.raises(PydanticValidationError):
            create_app_components()

    def test_short_secret_fails_fast(self, auth_env, monkeypatch):
        """HS256 secrets shorter than 32 bytes are refused at startup."""
        monkeypatch.setenv("AUTH_JWT_SECRET", "too-short-for-hs256")
        with pytest.raises(PydanticValidationError):
            create_app_components()
