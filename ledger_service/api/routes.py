"""
Ledger HTTP routes.

Every route here requires a verified caller and is rate limited per
origin (see dependencies). Bodies are read inside the handlers, after
those checks, and handed over as raw JSON so the ledger's own validator
decides what is missing or malformed.
"""

from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request

from ledger_service.api.dependencies import get_flow, require_identity
from ledger_service.config import get_settings
from ledger_service.errors import ValidationError
from ledger_service.models.audit import RequestContext
from ledger_service.models.transaction import (
    TransactionFilter,
    TransactionKind,
    TransactionStatus,
)
from ledger_service.orchestrator import LedgerFlow


router = APIRouter(tags=["ledger"])


def transaction_filter(
    tipo: Optional[TransactionKind] = Query(default=None),
    status: Optional[TransactionStatus] = Query(default=None),
    categoria_id: Optional[str] = Query(default=None),
    conta_id: Optional[str] = Query(default=None),
    data_inicio: Optional[date] = Query(default=None),
    data_fim: Optional[date] = Query(default=None),
) -> TransactionFilter:
    """Shared by the listing and the balance; `data_fim` is exclusive."""
    return TransactionFilter(
        kind=tipo,
        status=status,
        category_id=categoria_id or None,
        account_id=conta_id or None,
        date_from=data_inicio,
        date_to=data_fim,
    )


async def read_json_body(request: Request) -> Any:
    """Parsed JSON body, or None when the request carries none."""
    raw = await request.body()
    if not raw:
        return None
    try:
        return await request.json()
    except ValueError as e:
        raise ValidationError(f"Requisição inválida ({type(e).__name__})")


@router.get("/lancamentos")
async def list_transactions(
    criteria: TransactionFilter = Depends(transaction_filter),
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    _context: RequestContext = Depends(require_identity),
    flow: LedgerFlow = Depends(get_flow),
):
    app_settings = get_settings().app
    limit = min(limit or app_settings.default_page_size, app_settings.max_page_size)
    result = await flow.list_transactions(criteria, page=page, limit=limit)
    return result.model_dump(mode="json", by_alias=True)


@router.get("/lancamentos/{transaction_id}")
async def get_transaction(
    transaction_id: str,
    context: RequestContext = Depends(require_identity),
    flow: LedgerFlow = Depends(get_flow),
):
    view = await flow.get_transaction(transaction_id, context)
    return view.model_dump(mode="json", by_alias=True)


@router.post("/lancamentos", status_code=201)
async def create_transaction(
    request: Request,
    context: RequestContext = Depends(require_identity),
    flow: LedgerFlow = Depends(get_flow),
):
    payload = await read_json_body(request)
    view = await flow.create_transaction(payload, context)
    return view.model_dump(mode="json", by_alias=True)


@router.put("/lancamentos/{transaction_id}")
async def update_transaction(
    transaction_id: str,
    request: Request,
    context: RequestContext = Depends(require_identity),
    flow: LedgerFlow = Depends(get_flow),
):
    payload = await read_json_body(request)
    view = await flow.update_transaction(transaction_id, payload, context)
    return view.model_dump(mode="json", by_alias=True)


@router.delete("/lancamentos/{transaction_id}")
async def delete_transaction(
    transaction_id: str,
    context: RequestContext = Depends(require_identity),
    flow: LedgerFlow = Depends(get_flow),
):
    return await flow.delete_transaction(transaction_id, context)


@router.get("/relatorios")
async def period_report(
    tipo: str = Query(default="mensal"),
    mes: Optional[str] = Query(default=None),
    ano: Optional[str] = Query(default=None),
    context: RequestContext = Depends(require_identity),
    flow: LedgerFlow = Depends(get_flow),
):
    report = await flow.report(context, report_type=tipo, month=mes, year=ano)
    return report.model_dump(mode="json", by_alias=True)


@router.get("/saldo")
async def balance(
    criteria: TransactionFilter = Depends(transaction_filter),
    _context: RequestContext = Depends(require_identity),
    flow: LedgerFlow = Depends(get_flow),
):
    summary = await flow.balance(criteria)
    return summary.model_dump(mode="json", by_alias=True)
