"""
Shared fixtures.

Everything runs against the in-memory backends; no spreadsheet, no Redis.
Tokens are minted with PyJWT using the same secret the verifier trusts.
"""

import time
from decimal import Decimal

import jwt
import pytest
from fastapi.testclient import TestClient

from ledger_service.api import create_app
from ledger_service.audit import AuditLogger
from ledger_service.auth import IdentityVerifier
from ledger_service.models.reference import Account, Category, Fund, Person
from ledger_service.orchestrator import LedgerComponents, LedgerFlow
from ledger_service.ratelimit import RateLimiter
from ledger_service.services.storage import (
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    InMemoryRateLimitStorage,
)
from ledger_service.validation import TransactionValidator


JWT_SECRET = "test-secret-for-ledger-tokens-0123456789"


def make_token(
    sub: str = "user-1",
    secret: str = JWT_SECRET,
    audience: str = "authenticated",
    expires_in: int = 3600,
    **claims,
) -> str:
    payload = {
        "sub": sub,
        "aud": audience,
        "exp": int(time.time()) + expires_in,
        **claims,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


class FakeClock:
    """Manually advanced time source for the rate limiter."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def ledger_storage():
    storage = InMemoryLedgerStorage()
    storage.add_account(Account(id="A1", name="Caixa Geral"))
    storage.add_account(Account(id="A2", name="Conta Banco do Brasil"))
    storage.add_category(Category(id="C1", name="Dízimos", color="#16a34a"))
    storage.add_category(Category(id="C2", name="Contas de consumo", color="#dc2626"))
    storage.add_fund(Fund(id="F1", name="Fundo de Construção", color="#2563eb"))
    storage.add_person(Person(id="P1", name="Maria Souza"))
    return storage


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def validator(ledger_storage):
    return TransactionValidator(
        ledger_storage,
        max_plausible_amount=Decimal("1000000"),
        future_date_tolerance_days=365,
    )


@pytest.fixture
def flow(ledger_storage, audit_logger, validator):
    return LedgerFlow(ledger_storage, audit_logger=audit_logger, validator=validator)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def components(flow, audit_logger, clock):
    return LedgerComponents(
        flow=flow,
        verifier=IdentityVerifier(JWT_SECRET),
        rate_limiter=RateLimiter(
            InMemoryRateLimitStorage(),
            max_requests=100,
            window_seconds=60,
            clock=clock,
        ),
        audit_logger=audit_logger,
    )


@pytest.fixture
def app(components):
    return create_app(components)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def receipt_payload():
    return {
        "tipo": "receita",
        "descricao": "Dízimo",
        "valor": 100,
        "data_lancamento": "2024-01-10",
        "conta_id": "A1",
        "categoria_id": "C1",
    }


@pytest.fixture
def expense_payload():
    return {
        "tipo": "despesa",
        "descricao": "Conta de luz",
        "valor": 40,
        "data_lancamento": "2024-01-15",
        "conta_id": "A1",
        "categoria_id": "C2",
    }
