"""Tests for the Google Sheets backends, against an in-memory worksheet."""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from ledger_service.models.audit import AuditEventBuilder, RequestContext
from ledger_service.models.transaction import Transaction, TransactionFilter, TransactionStatus
from ledger_service.services.storage import StorageError
from ledger_service.services.storage.google_sheets import (
    AUDIT_COLUMNS,
    REFERENCE_COLUMNS,
    TRANSACTION_COLUMNS,
    GoogleSheetsAuditStorage,
    GoogleSheetsLedgerStorage,
)


class FakeWorksheet:
    """The handful of gspread.Worksheet calls the storage makes."""

    def __init__(self, header, rows=None):
        self.rows = [list(header)] + [list(r) for r in (rows or [])]

    def get_all_values(self):
        return [list(r) for r in self.rows]

    def col_values(self, col):
        return [r[col - 1] if len(r) >= col else "" for r in self.rows]

    def append_row(self, values, value_input_option=None):
        self.rows.append([str(v) for v in values])

    def update(self, range_name=None, values=None, value_input_option=None):
        row_number = int("".join(ch for ch in range_name.split(":")[0] if ch.isdigit()))
        self.rows[row_number - 1] = [str(v) for v in values[0]]

    def delete_rows(self, index):
        del self.rows[index - 1]


@pytest.fixture
def sheets():
    transactions = FakeWorksheet(TRANSACTION_COLUMNS)
    references = {
        "accounts": FakeWorksheet(REFERENCE_COLUMNS, [["A1", "Caixa Geral", "", "true"]]),
        "categories": FakeWorksheet(REFERENCE_COLUMNS, [["C1", "Dízimos", "#16a34a", "true"]]),
        "funds": FakeWorksheet(REFERENCE_COLUMNS, [["F1", "Missões", "", "false"]]),
        "people": FakeWorksheet(REFERENCE_COLUMNS, [["P1", "Maria Souza", "", ""]]),
    }
    audit = FakeWorksheet(AUDIT_COLUMNS)

    client = MagicMock()
    client.get_transactions_sheet.return_value = transactions
    client.get_reference_sheet.side_effect = lambda kind: references[kind]
    client.get_audit_sheet.return_value = audit
    return client, transactions, audit


def _tx(**overrides) -> Transaction:
    data = {
        "tipo": "receita",
        "descricao": "Dízimo",
        "valor": Decimal("100.00"),
        "data_lancamento": date(2024, 1, 10),
        "conta_id": "A1",
        "categoria_id": "C1",
        "created_by": "user-1",
    }
    data.update(overrides)
    return Transaction.model_validate(data)


class TestGoogleSheetsLedgerStorage:

    @pytest.mark.asyncio
    async def test_insert_and_read_back(self, sheets):
        client, worksheet, _ = sheets
        storage = GoogleSheetsLedgerStorage(client)
        tx = _tx(data_vencimento=date(2024, 1, 20))

        await storage.insert_transaction(tx)

        assert len(worksheet.rows) == 2
        assert await storage.get_transaction(tx.id) == tx

    @pytest.mark.asyncio
    async def test_replace_and_delete(self, sheets):
        client, worksheet, _ = sheets
        storage = GoogleSheetsLedgerStorage(client)
        tx = _tx()
        await storage.insert_transaction(tx)

        await storage.replace_transaction(tx.model_copy(update={"status": TransactionStatus.CANCELLED}))
        assert (await storage.get_transaction(tx.id)).status == TransactionStatus.CANCELLED

        assert await storage.delete_transaction(tx.id) is True
        assert await storage.delete_transaction(tx.id) is False
        assert await storage.get_transaction(tx.id) is None

    @pytest.mark.asyncio
    async def test_find_filters_sorts_and_pages(self, sheets):
        client, _, _ = sheets
        storage = GoogleSheetsLedgerStorage(client)
        for day in (5, 20, 12):
            await storage.insert_transaction(_tx(data_lancamento=date(2024, 1, day)))
        await storage.insert_transaction(_tx(data_lancamento=date(2024, 2, 1)))

        page, total = await storage.find_transactions(
            TransactionFilter(date_from=date(2024, 1, 1), date_to=date(2024, 2, 1)),
            limit=2,
        )
        assert total == 3
        assert [t.transaction_date.day for t in page] == [20, 12]

    @pytest.mark.asyncio
    async def test_reference_lookups(self, sheets):
        client, _, _ = sheets
        storage = GoogleSheetsLedgerStorage(client)

        assert (await storage.get_account("A1")).name == "Caixa Geral"
        assert (await storage.get_category("C1")).color == "#16a34a"
        assert (await storage.get_fund("F1")).active is False
        assert (await storage.get_person("P1")).name == "Maria Souza"
        assert await storage.get_category("C404") is None

    @pytest.mark.asyncio
    async def test_read_failure_is_storage_error(self, sheets):
        client, _, _ = sheets
        client.get_transactions_sheet.side_effect = ConnectionError("quota")
        storage = GoogleSheetsLedgerStorage(client)
        with pytest.raises(StorageError):
            await storage.find_transactions(TransactionFilter())


class TestGoogleSheetsAuditStorage:

    @pytest.mark.asyncio
    async def test_append_and_query(self, sheets):
        client, _, worksheet = sheets
        storage = GoogleSheetsAuditStorage(client)
        context = RequestContext(actor="user-1", origin_address="10.0.0.1", user_agent="pytest")
        tx = _tx()

        event = AuditEventBuilder.transaction_created(tx.id, tx.description, tx.amount, context)
        assert await storage.append_event(event) is True
        assert len(worksheet.rows) == 2

        [stored] = await storage.get_events_by_entity("transaction", str(tx.id))
        assert stored.event_id == event.event_id
        assert stored.user_agent == "pytest"
        assert stored.details["amount"] == "100.00"
