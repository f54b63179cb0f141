"""
Request dependencies: origin, rate limiting and caller identity.

Order matters. `require_identity` depends on `enforce_rate_limit`, so a
flood of unauthenticated requests is throttled before any token work.
"""

from typing import Optional

from fastapi import Depends, Header, Request

from ledger_service.auth import Identity
from ledger_service.models.audit import RequestContext
from ledger_service.orchestrator import LedgerComponents, LedgerFlow


def get_components(request: Request) -> LedgerComponents:
    return request.app.state.components


def get_flow(components: LedgerComponents = Depends(get_components)) -> LedgerFlow:
    return components.flow


def client_origin(request: Request) -> str:
    """First X-Forwarded-For hop, else the peer address."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def request_context(request: Request, actor: Optional[str] = None) -> RequestContext:
    return RequestContext(
        actor=actor,
        origin_address=client_origin(request),
        user_agent=request.headers.get("User-Agent"),
        endpoint=f"{request.method} {request.url.path}",
    )


def enforce_rate_limit(
    request: Request,
    components: LedgerComponents = Depends(get_components),
) -> str:
    """Count the request against its origin. Raises RateLimitedError."""
    origin = client_origin(request)
    components.rate_limiter.admit(origin)
    return origin


def require_identity(
    request: Request,
    _origin: str = Depends(enforce_rate_limit),
    authorization: Optional[str] = Header(default=None),
    components: LedgerComponents = Depends(get_components),
) -> RequestContext:
    """Verified caller plus where the call came from. Raises UnauthenticatedError."""
    identity: Identity = components.verifier.verify_header(authorization)
    context = request_context(request, actor=identity.user_id)
    # Picked up by the internal-error handler for its audit entry
    request.state.context = context
    return context
