"""
Error responses

One exhaustive table maps each ErrorKind to its HTTP status. Anything
that escapes as a non-LedgerError is internal: the caller sees a
generic message and the detail goes to an error-level audit entry.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ledger_service.api.dependencies import request_context
from ledger_service.errors import ErrorKind, InternalError, LedgerError, ValidationError


logger = structlog.get_logger("ledger_service.api")

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INTERNAL: 500,
}

GENERIC_ERROR = InternalError("Erro interno do servidor")


def _record_internal(request: Request, exc: Exception) -> None:
    context = getattr(request.state, "context", None) or request_context(request)
    components = getattr(request.app.state, "components", None)
    logger.error(
        "internal_error",
        endpoint=context.endpoint,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    if components is not None:
        components.audit_logger.record_error(
            error_type=type(exc).__name__,
            error_message=str(exc),
            context=context,
        )


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    if exc.kind == ErrorKind.INTERNAL:
        _record_internal(request, exc)
        return JSONResponse(status_code=500, content=GENERIC_ERROR.to_response())

    headers = None
    if exc.kind == ErrorKind.RATE_LIMITED:
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(
        status_code=STATUS_BY_KIND[exc.kind],
        content=exc.to_response(),
        headers=headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed query parameters or JSON bodies are ordinary 400s."""
    errors = exc.errors()
    field = None
    message = "Requisição inválida"
    if errors:
        loc = [
            part for part in errors[0].get("loc", ())
            if isinstance(part, str) and part not in ("query", "body", "path", "header")
        ]
        field = str(loc[-1]) if loc else None
        detail = errors[0].get("msg", "valor inválido")
        message = f"Campo inválido: {field} ({detail})" if field else f"Requisição inválida ({detail})"
    return await ledger_error_handler(request, ValidationError(message, field=field))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    _record_internal(request, exc)
    return JSONResponse(status_code=500, content=GENERIC_ERROR.to_response())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LedgerError, ledger_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
