"""
Identity Verification

Resolves a bearer credential into a stable caller identity. The ledger
trusts nothing the caller says about itself: the user id comes from the
signed token's `sub` claim, and only from there.

Tokens are the identity provider's access tokens (JWT, HS256 with the
project's shared secret, audience "authenticated" by default).

Authorization levels are not decided here. Being a recognized caller is
enough for ledger operations.
"""

from dataclasses import dataclass
from typing import Optional

import jwt
import structlog

from ledger_service.config import get_settings
from ledger_service.errors import UnauthenticatedError


BEARER_PREFIX = "bearer "

logger = structlog.get_logger("ledger_service.auth")


@dataclass(frozen=True)
class Identity:
    """Authenticated caller."""

    user_id: str
    email: Optional[str] = None
    role: Optional[str] = None


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an Authorization header value.

    Raises:
        UnauthenticatedError: header missing, wrong scheme or empty token
    """
    if not authorization:
        raise UnauthenticatedError("Authentication required")
    if not authorization.lower().startswith(BEARER_PREFIX):
        raise UnauthenticatedError("Invalid authentication")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise UnauthenticatedError("Invalid authentication")
    return token


class IdentityVerifier:
    """Validates access tokens against the identity provider's signing secret."""

    def __init__(
        self,
        secret: str,
        audience: Optional[str] = "authenticated",
        algorithm: str = "HS256",
    ):
        self._secret = secret
        self._audience = audience
        self._algorithm = algorithm

    @classmethod
    def from_settings(cls) -> "IdentityVerifier":
        auth = get_settings().auth
        return cls(
            secret=auth.jwt_secret,
            audience=auth.jwt_audience or None,
            algorithm=auth.jwt_algorithm,
        )

    def verify(self, token: str) -> Identity:
        """
        Verify signature, expiry and audience; return the caller.

        Raises:
            UnauthenticatedError: for any token that is not valid
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                audience=self._audience,
                options={
                    "require": ["sub", "exp"],
                    "verify_aud": self._audience is not None,
                },
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("token_rejected", reason="expired")
            raise UnauthenticatedError("Invalid authentication") from e
        except jwt.InvalidTokenError as e:
            logger.info("token_rejected", reason=type(e).__name__)
            raise UnauthenticatedError("Invalid authentication") from e

        user_id = claims.get("sub")
        if not isinstance(user_id, str) or not user_id:
            raise UnauthenticatedError("Invalid authentication")

        return Identity(
            user_id=user_id,
            email=claims.get("email"),
            role=claims.get("role"),
        )

    def verify_header(self, authorization: Optional[str]) -> Identity:
        return self.verify(extract_bearer_token(authorization))
