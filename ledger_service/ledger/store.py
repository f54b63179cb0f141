"""
Ledger Store

The authoritative CRUD surface over transactions. Owns payload
validation, default assignment and the joins that give transactions
their human-readable account/category names.

GUARANTEES:
- A payload that fails validation never reaches storage
- Unknown ids fail with NotFoundError before any write
- `tipo` is fixed at creation; updates cannot re-type a transaction
"""

from datetime import date, datetime, timezone
from typing import Any, Optional
from uuid import UUID

import structlog

from ledger_service.errors import NotFoundError
from ledger_service.models.reference import Account, Category, Fund, Person
from ledger_service.models.transaction import (
    DEFAULT_PAYMENT_METHOD,
    ReferenceRef,
    Transaction,
    TransactionFilter,
    TransactionStatus,
    TransactionView,
)
from ledger_service.services.storage import LedgerStorageInterface, RecordNotFoundError
from ledger_service.validation import TransactionValidator


logger = structlog.get_logger("ledger_service.ledger")


def parse_transaction_id(raw: str) -> UUID:
    """Ids are opaque to callers; anything that isn't one of ours is unknown."""
    try:
        return UUID(str(raw))
    except ValueError:
        raise NotFoundError("Lançamento não encontrado")


class _ReferenceCache:
    """Per-call memo so a page of 100 rows doesn't re-read each category."""

    def __init__(self, storage: LedgerStorageInterface):
        self._storage = storage
        self._seen: dict[tuple[str, str], Any] = {}

    async def get(self, kind: str, ref_id: Optional[str]):
        if not ref_id:
            return None
        key = (kind, ref_id)
        if key not in self._seen:
            getter = getattr(self._storage, f"get_{kind}")
            self._seen[key] = await getter(ref_id)
        return self._seen[key]


def _ref(entity: Optional[Account | Category | Fund | Person], with_color: bool = False) -> Optional[ReferenceRef]:
    if entity is None:
        return None
    color = getattr(entity, "color", None) if with_color else None
    return ReferenceRef(id=entity.id, name=entity.name, color=color)


class LedgerStore:
    """Validated create/read/update/delete over the ledger storage."""

    def __init__(
        self,
        storage: LedgerStorageInterface,
        validator: Optional[TransactionValidator] = None,
    ):
        self._storage = storage
        self._validator = validator or TransactionValidator(storage)

    async def _to_view(
        self,
        tx: Transaction,
        refs: _ReferenceCache,
        detailed: bool = False,
    ) -> TransactionView:
        view = TransactionView(
            **tx.model_dump(),
            account=_ref(await refs.get("account", tx.account_id)),
            category=_ref(await refs.get("category", tx.category_id), with_color=True),
        )
        if detailed:
            view.fund = _ref(await refs.get("fund", tx.fund_id), with_color=True)
            view.person = _ref(await refs.get("person", tx.person_id))
        return view

    async def get(self, transaction_id: str) -> TransactionView:
        tx = await self._storage.get_transaction(parse_transaction_id(transaction_id))
        if tx is None:
            raise NotFoundError("Lançamento não encontrado")
        return await self._to_view(tx, _ReferenceCache(self._storage), detailed=True)

    async def create(self, payload: Any, actor: str) -> TransactionView:
        """
        Validate, apply defaults and persist a new transaction.

        Raises:
            ValidationError: first missing/invalid field or unknown reference
        """
        data = self._validator.validate_create(payload)
        await self._validator.check_references(data)

        tx = Transaction(
            kind=data.kind,
            description=data.description,
            amount=data.amount,
            transaction_date=data.transaction_date or date.today(),
            due_date=data.due_date,
            account_id=data.account_id,
            category_id=data.category_id,
            fund_id=data.fund_id,
            person_id=data.person_id,
            payment_method=data.payment_method or DEFAULT_PAYMENT_METHOD,
            document_number=data.document_number,
            status=data.status or TransactionStatus.CONFIRMED,
            observations=data.observations,
            created_by=actor,
        )

        self._warn_if_suspicious(tx)
        await self._storage.insert_transaction(tx)
        logger.info("transaction_created", transaction_id=str(tx.id), kind=tx.kind.value)

        return await self._to_view(tx, _ReferenceCache(self._storage), detailed=True)

    async def update(self, transaction_id: str, payload: Any) -> tuple[TransactionView, list[str]]:
        """
        Apply a partial update. Last writer wins.

        Status changes are not restricted: a cancelled transaction may be
        confirmed again and confirmed amounts may be edited.

        Returns:
            (updated_view, changed_field_aliases)
        """
        tx_id = parse_transaction_id(transaction_id)
        update = self._validator.validate_update(payload)

        current = await self._storage.get_transaction(tx_id)
        if current is None:
            raise NotFoundError("Lançamento não encontrado")

        changes = update.changes()
        updated = current.model_copy(
            update={**changes, "updated_at": datetime.now(timezone.utc)}
        )
        # Re-run model validation on the merged record
        updated = Transaction.model_validate(updated.model_dump())

        self._warn_if_suspicious(updated)
        try:
            await self._storage.replace_transaction(updated)
        except RecordNotFoundError:
            # Deleted between our read and our write
            raise NotFoundError("Lançamento não encontrado")

        changed = [type(update).model_fields[name].alias or name for name in changes]
        logger.info("transaction_updated", transaction_id=str(tx_id), fields=changed)

        view = await self._to_view(updated, _ReferenceCache(self._storage), detailed=True)
        return view, changed

    async def delete(self, transaction_id: str) -> Transaction:
        """
        Permanently remove a transaction.

        Returns:
            The snapshot taken before removal (for the audit trail)
        """
        tx_id = parse_transaction_id(transaction_id)
        snapshot = await self._storage.get_transaction(tx_id)
        if snapshot is None:
            raise NotFoundError("Lançamento não encontrado")

        removed = await self._storage.delete_transaction(tx_id)
        if not removed:
            raise NotFoundError("Lançamento não encontrado")

        logger.info("transaction_deleted", transaction_id=str(tx_id))
        return snapshot

    def _warn_if_suspicious(self, tx: Transaction) -> None:
        issues = self._validator.semantic_warnings(
            amount=tx.amount,
            transaction_date=tx.transaction_date,
            due_date=tx.due_date,
        )
        for issue in issues:
            logger.warning(
                "transaction_needs_review",
                transaction_id=str(tx.id),
                field=issue.field,
                issue_type=issue.issue_type,
                message=issue.message,
            )

    # Kept last: inside the class body this name shadows the builtin
    async def list(
        self,
        criteria: TransactionFilter,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[TransactionView], int]:
        """
        One page of matching transactions, most recent first.

        Returns:
            (page_items, total_matching)
        """
        offset = (page - 1) * limit
        transactions, total = await self._storage.find_transactions(
            criteria, limit=limit, offset=offset
        )
        refs = _ReferenceCache(self._storage)
        return [await self._to_view(tx, refs) for tx in transactions], total

