"""
Unit tests for core.security module.
Tests password hashing and session token issuance/verification.
"""
import datetime as dt
import time

import jwt
import pytest

from app.config import ConfigurationError
from app.core.errors import DependencyError
from app.core.security import (
    PasswordHasher,
    TokenExpired,
    TokenMalformed,
    TokenService,
    TokenSignatureInvalid,
)

SECRET = "unit-test-signing-secret-0123456789abcdef"


def make_tokens(secret: str = SECRET, minutes: int = 5, clock=time.time) -> TokenService:
    return TokenService(secret, ttl=dt.timedelta(minutes=minutes), clock=clock)


class TestPasswordHashing:
    """Tests for password hashing and verification."""

    @pytest.mark.asyncio
    async def test_hash_is_salted(self):
        """Hashing twice gives different values, neither equal to the input."""
        hasher = PasswordHasher(rounds=4)
        hash1 = await hasher.hash("TestPassword123")
        hash2 = await hasher.hash("TestPassword123")
        assert hash1 != hash2
        assert "TestPassword123" not in hash1

    @pytest.mark.asyncio
    async def test_verify_correct_and_incorrect_password(self):
        hasher = PasswordHasher(rounds=4)
        hashed = await hasher.hash("TestPassword123")
        assert await hasher.verify("TestPassword123", hashed) is True
        assert await hasher.verify("WrongPassword456", hashed) is False

    @pytest.mark.asyncio
    async def test_verify_empty_inputs(self):
        hasher = PasswordHasher(rounds=4)
        hashed = await hasher.hash("TestPassword123")
        assert await hasher.verify("", hashed) is False
        assert await hasher.verify("TestPassword123", "") is False

    @pytest.mark.asyncio
    async def test_verify_unrecognized_hash_is_a_mismatch(self):
        hasher = PasswordHasher(rounds=4)
        assert await hasher.verify("TestPassword123", "plain-text-not-a-hash") is False

    @pytest.mark.asyncio
    async def test_hash_failure_is_a_dependency_error(self, monkeypatch):
        hasher = PasswordHasher(rounds=4)

        def boom(*args, **kwargs):
            raise RuntimeError("backend down")

        monkeypatch.setattr(hasher._context, "hash", boom)
        with pytest.raises(DependencyError):
            await hasher.hash("TestPassword123")


class TestTokens:
    """Tests for token creation and validation."""

    def test_empty_secret_is_refused(self):
        with pytest.raises(ConfigurationError):
            TokenService("", ttl=dt.timedelta(minutes=5))
        with pytest.raises(ConfigurationError):
            TokenService(None, ttl=dt.timedelta(minutes=5))

    def test_issue_and_verify_claims(self):
        now = time.time()
        tokens = make_tokens(clock=lambda: now)
        token = tokens.issue({"id": "user-1", "role": "co", "name": "acme", "standID": "stand-9"})
        claims = tokens.verify(token)
        assert claims.id == "user-1"
        assert claims.role == "co"
        assert claims.name == "acme"
        assert claims.stand_id == "stand-9"
        assert claims.email is None
        assert claims.issued_at == pytest.approx(now)
        assert claims.expires_at == int(now + 300)

    def test_none_claims_are_left_out(self):
        tokens = make_tokens()
        token = tokens.issue({"id": "user-1", "role": "visitor", "standID": None})
        payload = jwt.decode(token, SECRET, algorithms=["HS256"])
        assert "standID" not in payload

    def test_ttl_override(self):
        now = time.time()
        tokens = make_tokens(clock=lambda: now)
        token = tokens.issue({"id": "user-1", "role": "admin"}, ttl=dt.timedelta(seconds=30))
        assert tokens.verify(token).expires_at == int(now + 30)

    def test_expired_token(self):
        issued_long_ago = make_tokens(clock=lambda: time.time() - 3600)
        token = issued_long_ago.issue({"id": "user-1", "role": "co"})
        with pytest.raises(TokenExpired) as exc_info:
            make_tokens().verify(token)
        assert exc_info.value.reason == "expired"

    def test_wrong_secret(self):
        token = make_tokens(secret="another-signing-secret-0123456789abcdef").issue(
            {"id": "user-1", "role": "co"}
        )
        with pytest.raises(TokenSignatureInvalid):
            make_tokens().verify(token)

    @pytest.mark.parametrize("token", ["", "abc", "not.a.jwt"])
    def test_malformed_token(self, token):
        with pytest.raises(TokenMalformed):
            make_tokens().verify(token)

    def test_missing_role_is_malformed(self):
        token = make_tokens().issue({"id": "user-1"})
        with pytest.raises(TokenMalformed):
            make_tokens().verify(token)

    def test_unknown_role_is_malformed(self):
        token = make_tokens().issue({"id": "user-1", "role": "root"})
        with pytest.raises(TokenMalformed):
            make_tokens().verify(token)

    def test_missing_id_is_malformed(self):
        token = make_tokens().issue({"role": "admin"})
        with pytest.raises(TokenMalformed):
            make_tokens().verify(token)
