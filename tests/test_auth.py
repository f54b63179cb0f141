"""Tests for bearer token verification."""

import jwt
import pytest

from ledger_service.auth import IdentityVerifier, extract_bearer_token
from ledger_service.errors import UnauthenticatedError

from tests.conftest import JWT_SECRET, make_token


@pytest.fixture
def verifier():
    return IdentityVerifier(JWT_SECRET)


class TestBearerExtraction:

    def test_extracts_token(self):
        assert extract_bearer_token("Bearer abc.def") == "abc.def"

    def test_scheme_is_case_insensitive(self):
        assert extract_bearer_token("bearer abc") == "abc"

    @pytest.mark.parametrize("header", [None, ""])
    def test_missing_header(self, header):
        with pytest.raises(UnauthenticatedError) as exc_info:
            extract_bearer_token(header)
        assert exc_info.value.message == "Authentication required"

    @pytest.mark.parametrize("header", ["Basic dXNlcjpwYXNz", "Bearer ", "Token abc"])
    def test_malformed_header(self, header):
        with pytest.raises(UnauthenticatedError):
            extract_bearer_token(header)


class TestIdentityVerifier:
    """Token verification against the shared secret."""

    def test_valid_token(self, verifier):
        identity = verifier.verify(make_token(sub="user-42", email="tesouraria@igreja.org"))
        assert identity.user_id == "user-42"
        assert identity.email == "tesouraria@igreja.org"

    def test_expired_token(self, verifier):
        with pytest.raises(UnauthenticatedError):
            verifier.verify(make_token(expires_in=-60))

    def test_wrong_secret(self, verifier):
        with pytest.raises(UnauthenticatedError):
            verifier.verify(make_token(secret="another-secret-entirely-0123456789"))

    def test_wrong_audience(self, verifier):
        with pytest.raises(UnauthenticatedError):
            verifier.verify(make_token(audience="anon"))

    def test_missing_subject(self, verifier):
        token = jwt.encode(
            {"aud": "authenticated", "exp": 9_999_999_999},
            JWT_SECRET,
            algorithm="HS256",
        )
        with pytest.raises(UnauthenticatedError):
            verifier.verify(token)

    def test_garbage_token(self, verifier):
        with pytest.raises(UnauthenticatedError):
            verifier.verify("not-a-jwt")

    def test_verify_header(self, verifier):
        identity = verifier.verify_header(f"Bearer {make_token(sub='user-7')}")
        assert identity.user_id == "user-7"

    def test_from_settings(self, monkeypatch):
        monkeypatch.setenv("AUTH_JWT_SECRET", JWT_SECRET)
        verifier = IdentityVerifier.from_settings()
        assert verifier.verify(make_token()).user_id == "user-1"
