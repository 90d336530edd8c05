# app/core/security.py
"""
Security module for authentication.
Handles password hashing and session token issuance/verification.

Both pieces are plain classes built once at startup and shared through
app.state, so tests can construct them with their own secret, work factor
or clock.
"""
import asyncio
import datetime as dt
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import jwt  # PyJWT
from passlib.context import CryptContext

from app.config import ConfigurationError
from app.core.errors import DependencyError
from app.models.user import ROLES

logger = logging.getLogger("uvicorn.error")


class PasswordHasher:
    """
    One-way adaptive password hashing (bcrypt).

    Hashing and verification are CPU-bound, so both run in a worker thread
    and never block the event loop.
    """

    def __init__(self, rounds: int = 10):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,  # Work factor
        )

    async def hash(self, plain: str) -> str:
        """
        Hash a plain text password.

        Raises:
            DependencyError: If the hashing backend fails. Creation requests
                must abort in that case.
        """
        try:
            return await asyncio.to_thread(self._context.hash, plain)
        except Exception as exc:
            raise DependencyError("password hashing failed") from exc

    async def verify(self, plain: str, hashed: str) -> bool:
        """
        Compare a plain text password with a stored hash.

        A mismatch is a normal outcome and returns False. A stored value that
        is not a recognizable hash is treated the same way.
        """
        if not plain or not hashed:
            return False
        try:
            return await asyncio.to_thread(self._context.verify, plain, hashed)
        except (ValueError, TypeError):
            logger.warning("[security] stored password hash could not be parsed")
            return False


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------
class TokenError(Exception):
    """Token could not be accepted. `reason` is for logs only."""
    reason = "invalid"


class TokenMalformed(TokenError):
    reason = "malformed"


class TokenSignatureInvalid(TokenError):
    reason = "signature_invalid"


class TokenExpired(TokenError):
    reason = "expired"


@dataclass(frozen=True)
class TokenClaims:
    id: str
    role: str
    issued_at: float
    expires_at: float
    name: Optional[str] = None
    email: Optional[str] = None
    stand_id: Optional[str] = None


class TokenService:
    """
    Issues and verifies signed, time-limited bearer tokens (HS256).

    Tokens are stateless: nothing is stored server-side. `iat` is written as
    a float so it can be compared with a recorded logout time.
    """

    REQUIRED_CLAIMS = ["id", "role", "iat", "exp"]

    def __init__(
        self,
        secret: str | None,
        ttl: dt.timedelta,
        algorithm: str = "HS256",
        clock: Callable[[], float] = time.time,
    ):
        if not (secret or "").strip():
            raise ConfigurationError("JWT secret is not configured")
        self._secret = secret
        self._ttl = ttl
        self._algorithm = algorithm
        self._clock = clock

    @property
    def ttl(self) -> dt.timedelta:
        return self._ttl

    def issue(self, claims: dict[str, Any], ttl: dt.timedelta | None = None) -> str:
        """
        Create a signed token embedding `claims`.

        The expiry is derived from `ttl` (defaults to the configured lifetime).
        Claims with a None value are left out.
        """
        now = self._clock()
        lifetime = ttl if ttl is not None else self._ttl
        payload = {k: v for k, v in claims.items() if v is not None}
        payload["iat"] = now
        payload["exp"] = int(now + lifetime.total_seconds())
        try:
            return jwt.encode(payload, self._secret, algorithm=self._algorithm)
        except Exception as exc:
            raise DependencyError("token signing failed") from exc

    def verify(self, token: str) -> TokenClaims:
        """
        Check signature and expiry and return the decoded claims.

        Raises:
            TokenExpired: Signature is valid but the token is past its expiry.
            TokenSignatureInvalid: Signature does not match the secret.
            TokenMalformed: Not a JWT, or a required claim is missing/invalid.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": self.REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired(str(exc)) from exc
        except jwt.InvalidSignatureError as exc:
            raise TokenSignatureInvalid(str(exc)) from exc
        except jwt.InvalidTokenError as exc:
            raise TokenMalformed(str(exc)) from exc

        if payload["role"] not in ROLES:
            raise TokenMalformed(f"unknown role {payload['role']!r}")

        return TokenClaims(
            id=str(payload["id"]),
            role=payload["role"],
            issued_at=float(payload["iat"]),
            expires_at=float(payload["exp"]),
            name=payload.get("name"),
            email=payload.get("email"),
            stand_id=payload.get("standID"),
        )
