"""Identity verification package."""

from ledger_service.auth.verifier import Identity, IdentityVerifier, extract_bearer_token

__all__ = ["Identity", "IdentityVerifier", "extract_bearer_token"]
