"""HTTP surface of the ledger service."""

from ledger_service.api.app import create_app

__all__ = ["create_app"]
