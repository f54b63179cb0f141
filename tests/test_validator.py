"""Tests for two-stage payload validation."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from ledger_service.errors import ValidationError
from ledger_service.models.transaction import TransactionKind
from ledger_service.validation import REQUIRED_CREATE_FIELDS, TransactionValidator


@pytest.fixture
def schema_validator():
    """No storage: schema checks only."""
    return TransactionValidator(
        max_plausible_amount=Decimal("1000000"),
        future_date_tolerance_days=365,
    )


class TestCreateValidation:
    """Stage 1 for create payloads."""

    def test_valid_payload(self, schema_validator, receipt_payload):
        data = schema_validator.validate_create(receipt_payload)
        assert data.kind == TransactionKind.RECEIPT
        assert data.amount == Decimal("100")
        assert data.transaction_date == date(2024, 1, 10)

    @pytest.mark.parametrize("field", REQUIRED_CREATE_FIELDS)
    def test_each_missing_required_field_is_named(self, schema_validator, receipt_payload, field):
        del receipt_payload[field]
        with pytest.raises(ValidationError) as exc_info:
            schema_validator.validate_create(receipt_payload)
        assert exc_info.value.field == field
        assert exc_info.value.message == f"Campo obrigatório: {field}"

    def test_first_missing_field_wins(self, schema_validator):
        """Fields are checked in a fixed order; only the first is reported."""
        with pytest.raises(ValidationError) as exc_info:
            schema_validator.validate_create({"descricao": "x", "categoria_id": "C1"})
        assert exc_info.value.field == "tipo"

    def test_blank_string_counts_as_missing(self, schema_validator, receipt_payload):
        receipt_payload["descricao"] = "   "
        with pytest.raises(ValidationError) as exc_info:
            schema_validator.validate_create(receipt_payload)
        assert exc_info.value.field == "descricao"

    def test_invalid_kind(self, schema_validator, receipt_payload):
        receipt_payload["tipo"] = "transferencia"
        with pytest.raises(ValidationError) as exc_info:
            schema_validator.validate_create(receipt_payload)
        assert exc_info.value.field == "tipo"
        assert "receita" in exc_info.value.message

    def test_non_positive_amount(self, schema_validator, receipt_payload):
        receipt_payload["valor"] = 0
        with pytest.raises(ValidationError) as exc_info:
            schema_validator.validate_create(receipt_payload)
        assert exc_info.value.field == "valor"

    def test_malformed_date(self, schema_validator, receipt_payload):
        receipt_payload["data_lancamento"] = "10/01/2024"
        with pytest.raises(ValidationError) as exc_info:
            schema_validator.validate_create(receipt_payload)
        assert exc_info.value.field == "data_lancamento"

    def test_invalid_status(self, schema_validator, receipt_payload):
        receipt_payload["status"] = "pago"
        with pytest.raises(ValidationError) as exc_info:
            schema_validator.validate_create(receipt_payload)
        assert exc_info.value.field == "status"

    def test_payload_must_be_an_object(self, schema_validator):
        with pytest.raises(ValidationError):
            schema_validator.validate_create(["tipo", "receita"])
        with pytest.raises(ValidationError):
            schema_validator.validate_create(None)


class TestUpdateValidation:
    """Stage 1 for partial updates."""

    def test_partial_update(self, schema_validator):
        update = schema_validator.validate_update({"descricao": "Dízimo de janeiro"})
        assert update.changes() == {"description": "Dízimo de janeiro"}

    def test_cannot_null_required_field(self, schema_validator):
        with pytest.raises(ValidationError) as exc_info:
            schema_validator.validate_update({"valor": None})
        assert exc_info.value.field == "valor"

    def test_optional_field_can_be_cleared(self, schema_validator):
        update = schema_validator.validate_update({"observacoes": None})
        assert update.changes() == {"observations": None}

    def test_invalid_amount(self, schema_validator):
        with pytest.raises(ValidationError):
            schema_validator.validate_update({"valor": -5})


class TestReferenceCheck:
    """Referenced account, category and fund must exist."""

    @pytest.mark.asyncio
    async def test_known_references_pass(self, validator, receipt_payload):
        data = validator.validate_create({**receipt_payload, "fundo_id": "F1"})
        await validator.check_references(data)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field,value", [
        ("conta_id", "A404"),
        ("categoria_id", "C404"),
        ("fundo_id", "F404"),
    ])
    async def test_unknown_reference(self, validator, receipt_payload, field, value):
        data = validator.validate_create({**receipt_payload, field: value})
        with pytest.raises(ValidationError) as exc_info:
            await validator.check_references(data)
        assert exc_info.value.field == field


class TestSemanticWarnings:
    """Stage 2 never blocks; it only reports."""

    def test_clean_values_have_no_warnings(self, schema_validator):
        issues = schema_validator.semantic_warnings(
            amount=Decimal("100"), transaction_date=date.today(), due_date=None
        )
        assert issues == []

    def test_large_amount(self, schema_validator):
        issues = schema_validator.semantic_warnings(
            amount=Decimal("5000000"), transaction_date=date.today(), due_date=None
        )
        assert [i.issue_type for i in issues] == ["suspicious_value"]

    def test_far_future_date(self, schema_validator):
        issues = schema_validator.semantic_warnings(
            amount=Decimal("10"),
            transaction_date=date.today() + timedelta(days=400),
            due_date=None,
        )
        assert [i.field for i in issues] == ["data_lancamento"]

    def test_due_date_before_transaction_date(self, schema_validator):
        issues = schema_validator.semantic_warnings(
            amount=Decimal("10"),
            transaction_date=date(2024, 1, 10),
            due_date=date(2024, 1, 5),
        )
        assert [i.issue_type for i in issues] == ["inconsistent"]
