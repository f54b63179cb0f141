"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is a supported storage backend because:
1. Church treasurers can view the ledger directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (fine for a single congregation)
- No transactions (we handle this with careful ordering)
- Limited query capabilities (we filter in Python)

The implementation follows the abstract interface, so we can swap
to PostgreSQL later without changing business logic.
"""

import json
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Optional
from uuid import UUID

import gspread
from gspread.utils import rowcol_to_a1
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from ledger_service.config import get_settings
from ledger_service.models.audit import AuditActionType, AuditEvent, AuditLevel
from ledger_service.models.reference import NEUTRAL_COLOR, Account, Category, Fund, Person
from ledger_service.models.transaction import (
    Transaction,
    TransactionFilter,
    TransactionKind,
    TransactionStatus,
)
from ledger_service.services.storage.interface import (
    AuditStorageInterface,
    LedgerStorageInterface,
    RecordNotFoundError,
    StorageConnectionError,
    StorageError,
)


# Column mappings for the transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "tipo",
    "descricao",
    "valor",
    "data_lancamento",
    "data_vencimento",
    "conta_id",
    "categoria_id",
    "fundo_id",
    "pessoa_id",
    "forma_pagamento",
    "numero_documento",
    "status",
    "observacoes",
    "created_by",
    "created_at",
    "updated_at",
]

# Reference sheets: id, nome, cor, ativo (people use nome_completo)
REFERENCE_COLUMNS = ["id", "nome", "cor", "ativo"]

AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "usuario_id",
    "tipo_acao",
    "nivel_log",
    "entity_type",
    "entity_id",
    "acao",
    "detalhes",
    "ip_address",
    "user_agent",
    "error_message",
]

_retry_policy = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)


def _safe_getter(row: list) -> Callable[[int], str]:
    """Handle short rows gracefully."""
    def safe_get(index: int, default: str = "") -> str:
        try:
            return row[index] if row[index] else default
        except IndexError:
            return default
    return safe_get


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @_retry_policy
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StorageConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StorageConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StorageConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create(self, title: str, columns: list[str], rows: int = 1000) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_transactions_sheet(self) -> gspread.Worksheet:
        return self._get_or_create(
            self._settings.transactions_sheet_name, TRANSACTION_COLUMNS
        )

    def get_reference_sheet(self, kind: str) -> gspread.Worksheet:
        """Reference sheet by kind: accounts, categories, funds or people."""
        title = getattr(self._settings, f"{kind}_sheet_name")
        return self._get_or_create(title, REFERENCE_COLUMNS, rows=200)

    def get_audit_sheet(self) -> gspread.Worksheet:
        return self._get_or_create(
            self._settings.audit_sheet_name,
            AUDIT_COLUMNS,
            rows=5000,  # More rows for audit log
        )


class GoogleSheetsLedgerStorage(LedgerStorageInterface):
    """
    Google Sheets implementation of ledger storage.

    Transactions are stored one per row; reference entities live in
    their own sheets and are read-only from here.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _transaction_to_row(self, tx: Transaction) -> list:
        """Convert a Transaction to a spreadsheet row."""
        return [
            str(tx.id),
            tx.kind.value,
            tx.description,
            str(tx.amount),
            tx.transaction_date.isoformat(),
            tx.due_date.isoformat() if tx.due_date else "",
            tx.account_id,
            tx.category_id,
            tx.fund_id or "",
            tx.person_id or "",
            tx.payment_method,
            tx.document_number or "",
            tx.status.value,
            tx.observations or "",
            tx.created_by or "",
            tx.created_at.isoformat(),
            tx.updated_at.isoformat(),
        ]

    def _row_to_transaction(self, row: list) -> Transaction:
        """Convert a spreadsheet row to a Transaction."""
        safe_get = _safe_getter(row)
        return Transaction(
            id=UUID(safe_get(0)),
            kind=TransactionKind(safe_get(1)),
            description=safe_get(2),
            amount=Decimal(safe_get(3)),
            transaction_date=date.fromisoformat(safe_get(4)),
            due_date=date.fromisoformat(safe_get(5)) if safe_get(5) else None,
            account_id=safe_get(6),
            category_id=safe_get(7),
            fund_id=safe_get(8) or None,
            person_id=safe_get(9) or None,
            payment_method=safe_get(10, "dinheiro"),
            document_number=safe_get(11) or None,
            status=TransactionStatus(safe_get(12)),
            observations=safe_get(13) or None,
            created_by=safe_get(14) or None,
            created_at=datetime.fromisoformat(safe_get(15)),
            updated_at=datetime.fromisoformat(safe_get(16)),
        )

    def _find_row_index(self, sheet: gspread.Worksheet, transaction_id: UUID) -> Optional[int]:
        """1-based sheet row of the transaction (row 1 is the header)."""
        ids = sheet.col_values(1)
        for idx, value in enumerate(ids[1:], start=2):
            if value == str(transaction_id):
                return idx
        return None

    @_retry_policy
    async def insert_transaction(self, transaction: Transaction) -> None:
        try:
            sheet = self._client.get_transactions_sheet()
            sheet.append_row(self._transaction_to_row(transaction), value_input_option="RAW")
        except Exception as e:
            raise StorageError(f"Failed to save transaction: {e}")

    async def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        try:
            sheet = self._client.get_transactions_sheet()
            for row in sheet.get_all_values()[1:]:
                if row and row[0] == str(transaction_id):
                    return self._row_to_transaction(row)
            return None
        except Exception as e:
            raise StorageError(f"Failed to get transaction: {e}")

    async def replace_transaction(self, transaction: Transaction) -> None:
        try:
            sheet = self._client.get_transactions_sheet()
            idx = self._find_row_index(sheet, transaction.id)
            if idx is None:
                raise RecordNotFoundError(f"Transaction not found: {transaction.id}")

            last_col = rowcol_to_a1(idx, len(TRANSACTION_COLUMNS))
            sheet.update(
                range_name=f"A{idx}:{last_col}",
                values=[self._transaction_to_row(transaction)],
                value_input_option="RAW",
            )
        except RecordNotFoundError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update transaction: {e}")

    async def delete_transaction(self, transaction_id: UUID) -> bool:
        try:
            sheet = self._client.get_transactions_sheet()
            idx = self._find_row_index(sheet, transaction_id)
            if idx is None:
                return False
            sheet.delete_rows(idx)
            return True
        except Exception as e:
            raise StorageError(f"Failed to delete transaction: {e}")

    async def find_transactions(
        self,
        criteria: TransactionFilter,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> tuple[list[Transaction], int]:
        try:
            sheet = self._client.get_transactions_sheet()
            all_rows = sheet.get_all_values()[1:]  # Skip header
        except Exception as e:
            raise StorageError(f"Failed to list transactions: {e}")

        matches = []
        for row in all_rows:
            if not row or not row[0]:  # Skip empty rows
                continue
            # A malformed row is a data problem, not a reason to hide it
            tx = self._row_to_transaction(row)
            if criteria.matches(tx):
                matches.append(tx)

        # Newest first
        matches.sort(key=lambda t: (t.transaction_date, t.created_at), reverse=True)

        total = len(matches)
        end = None if limit is None else offset + limit
        return matches[offset:end], total

    def _lookup_reference(self, kind: str, ref_id: str) -> Optional[list]:
        try:
            sheet = self._client.get_reference_sheet(kind)
            for row in sheet.get_all_values()[1:]:
                if row and row[0] == ref_id:
                    return row
            return None
        except Exception as e:
            raise StorageError(f"Failed to read {kind}: {e}")

    @staticmethod
    def _is_active(value: str) -> bool:
        return value.strip().lower() not in ("false", "0", "nao", "não")

    async def get_account(self, account_id: str) -> Optional[Account]:
        row = self._lookup_reference("accounts", account_id)
        if row is None:
            return None
        safe_get = _safe_getter(row)
        return Account(id=safe_get(0), name=safe_get(1), active=self._is_active(safe_get(3, "true")))

    async def get_category(self, category_id: str) -> Optional[Category]:
        row = self._lookup_reference("categories", category_id)
        if row is None:
            return None
        safe_get = _safe_getter(row)
        return Category(
            id=safe_get(0),
            name=safe_get(1),
            color=safe_get(2, NEUTRAL_COLOR),
            active=self._is_active(safe_get(3, "true")),
        )

    async def get_fund(self, fund_id: str) -> Optional[Fund]:
        row = self._lookup_reference("funds", fund_id)
        if row is None:
            return None
        safe_get = _safe_getter(row)
        return Fund(
            id=safe_get(0),
            name=safe_get(1),
            color=safe_get(2) or None,
            active=self._is_active(safe_get(3, "true")),
        )

    async def get_person(self, person_id: str) -> Optional[Person]:
        row = self._lookup_reference("people", person_id)
        if row is None:
            return None
        safe_get = _safe_getter(row)
        return Person(id=safe_get(0), name=safe_get(1), active=self._is_active(safe_get(3, "true")))


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        safe_get = _safe_getter(row)
        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            actor=safe_get(2) or None,
            action_type=AuditActionType(safe_get(3)),
            level=AuditLevel(safe_get(4)),
            entity_type=safe_get(5) or None,
            entity_id=safe_get(6) or None,
            description=safe_get(7),
            details=json.loads(safe_get(8)) if safe_get(8) else {},
            origin_address=safe_get(9, "unknown"),
            user_agent=safe_get(10) or None,
            error_message=safe_get(11) or None,
        )

    @_retry_policy
    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event. Failures propagate to the audit logger."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to write audit event: {e}")

    def _read_events(self) -> list[AuditEvent]:
        try:
            sheet = self._client.get_audit_sheet()
            all_rows = sheet.get_all_values()[1:]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

        events = []
        for row in all_rows:
            if row and row[0]:
                events.append(self._row_to_event(row))
        return events

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        events = [
            e for e in self._read_events()
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        events = self._read_events()
        # Sort newest first
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
