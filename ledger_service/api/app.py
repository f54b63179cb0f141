"""
FastAPI application factory.

Components are created once per process (or injected by tests) and
hung on `app.state`. Pending audit writes are drained at shutdown.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI

from ledger_service import __version__
from ledger_service.api.errors import register_error_handlers
from ledger_service.api.routes import router
from ledger_service.orchestrator import LedgerComponents, create_app_components


logger = structlog.get_logger("ledger_service.api")


def create_app(components: Optional[LedgerComponents] = None) -> FastAPI:
    components = components or create_app_components()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("ledger_service_started", version=__version__)
        yield
        await components.audit_logger.drain()
        logger.info(
            "ledger_service_stopped",
            failed_audit_writes=components.audit_logger.failed_writes,
        )

    app = FastAPI(
        title="Ledger Service",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.components = components

    register_error_handlers(app)
    app.include_router(router)

    @app.get("/healthz", tags=["health"])
    async def healthz():
        return {"status": "ok"}

    return app
