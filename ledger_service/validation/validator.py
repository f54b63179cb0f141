"""
Two-Stage Payload Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION (blocking):
- Required field presence, reported in a fixed order
- Enum membership (tipo, status)
- Types and ranges (valor > 0, ISO dates, lengths)
- Referenced account/category/fund must exist

STAGE 2 - SEMANTIC VALIDATION (non-blocking):
- Implausibly large amounts
- Dates far in the future
- Due date before the transaction date
These are returned as warnings for the caller to log; bookkeeping
of odd-but-real movements must stay possible.

IMPORTANT: Validation NEVER cleans or rewrites input. A payload is
either accepted as-is or rejected with the field that failed.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from ledger_service.config import get_settings
from ledger_service.errors import ValidationError
from ledger_service.models.transaction import (
    TransactionCreate,
    TransactionKind,
    TransactionUpdate,
)
from ledger_service.services.storage import LedgerStorageInterface


REQUIRED_CREATE_FIELDS = ("tipo", "descricao", "valor", "conta_id", "categoria_id")


class ValidationIssue(BaseModel):
    """A single non-blocking finding about an accepted payload."""

    field: str
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'suspicious_value', 'future_date')"
    )
    message: str


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def _first_error(exc: PydanticValidationError) -> ValidationError:
    """Translate pydantic's error list into our single-field error."""
    error = exc.errors()[0]
    field = str(error["loc"][0]) if error.get("loc") else None
    message = error.get("msg", "valor inválido")
    if field:
        return ValidationError(f"Campo inválido: {field} ({message})", field=field)
    return ValidationError(f"Payload inválido ({message})")


class TransactionValidator:
    """
    Validates create and update payloads.

    Stage 1 needs storage only for the reference check; pass None
    to skip it (pure schema validation).
    """

    def __init__(
        self,
        storage: Optional[LedgerStorageInterface] = None,
        max_plausible_amount: Optional[Decimal] = None,
        future_date_tolerance_days: Optional[int] = None,
    ):
        self._storage = storage
        if max_plausible_amount is None or future_date_tolerance_days is None:
            app_settings = get_settings().app
            if max_plausible_amount is None:
                max_plausible_amount = Decimal(str(app_settings.max_plausible_amount))
            if future_date_tolerance_days is None:
                future_date_tolerance_days = app_settings.future_date_tolerance_days
        self._max_amount = max_plausible_amount
        self._future_tolerance = timedelta(days=future_date_tolerance_days)

    @staticmethod
    def _require_object(payload: Any) -> dict:
        if not isinstance(payload, dict):
            raise ValidationError("O corpo da requisição deve ser um objeto JSON")
        return payload

    def validate_create(self, payload: Any) -> TransactionCreate:
        """
        Stage 1 for a create payload.

        Raises:
            ValidationError: naming the first missing or invalid field
        """
        payload = self._require_object(payload)

        for field in REQUIRED_CREATE_FIELDS:
            if _is_missing(payload.get(field)):
                raise ValidationError(f"Campo obrigatório: {field}", field=field)

        allowed_kinds = [k.value for k in TransactionKind]
        if payload["tipo"] not in allowed_kinds:
            raise ValidationError(
                "Tipo deve ser 'receita' ou 'despesa'",
                field="tipo",
            )

        try:
            return TransactionCreate.model_validate(payload)
        except PydanticValidationError as e:
            raise _first_error(e) from e

    def validate_update(self, payload: Any) -> TransactionUpdate:
        """
        Stage 1 for a partial update payload.

        Raises:
            ValidationError: on a malformed field or an attempt to null a required one
        """
        payload = self._require_object(payload)

        try:
            update = TransactionUpdate.model_validate(payload)
        except PydanticValidationError as e:
            raise _first_error(e) from e

        for name, value in update.changes().items():
            if name in TransactionUpdate.NON_NULLABLE and value is None:
                alias = TransactionUpdate.model_fields[name].alias or name
                raise ValidationError(f"Campo obrigatório: {alias}", field=alias)

        return update

    async def check_references(self, create: TransactionCreate) -> None:
        """
        Referenced account, category and fund must exist.

        Inactive entities are accepted; hiding them from new entries is
        the job of the screens that offer them.
        """
        if self._storage is None:
            return

        if await self._storage.get_account(create.account_id) is None:
            raise ValidationError(
                f"Conta não encontrada: {create.account_id}", field="conta_id"
            )
        if await self._storage.get_category(create.category_id) is None:
            raise ValidationError(
                f"Categoria não encontrada: {create.category_id}", field="categoria_id"
            )
        if create.fund_id and await self._storage.get_fund(create.fund_id) is None:
            raise ValidationError(
                f"Fundo não encontrado: {create.fund_id}", field="fundo_id"
            )

    def semantic_warnings(
        self,
        amount: Optional[Decimal],
        transaction_date: Optional[date],
        due_date: Optional[date],
    ) -> list[ValidationIssue]:
        """Stage 2. Never blocks; returns what deserves a second look."""
        issues = []
        today = date.today()

        if amount is not None and amount > self._max_amount:
            issues.append(ValidationIssue(
                field="valor",
                issue_type="suspicious_value",
                message=f"Valor (R$ {amount:,.2f}) acima do limite usual",
            ))

        if transaction_date and transaction_date > today + self._future_tolerance:
            issues.append(ValidationIssue(
                field="data_lancamento",
                issue_type="future_date",
                message=f"Data do lançamento ({transaction_date}) muito no futuro",
            ))

        if due_date and transaction_date and due_date < transaction_date:
            issues.append(ValidationIssue(
                field="data_vencimento",
                issue_type="inconsistent",
                message="Data de vencimento anterior à data do lançamento",
            ))

        return issues
