# app/services/identity.py
"""
Identity resolution and login.

The credential store is reached through the small CredentialStore interface
so the auth flow does not depend on how users are indexed. AuthService puts
the identity cache in front of it: a cache hit skips the store query, never
the password check.
"""
from __future__ import annotations

import datetime as dt
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from tortoise.exceptions import BaseORMException
from tortoise.expressions import Q

from app.core.errors import AuthenticationError, DependencyError
from app.core.security import PasswordHasher, TokenService
from app.models.user import User

logger = logging.getLogger("uvicorn.error")

INVALID_CREDENTIALS = "Credenciales incorrectas"


@dataclass(frozen=True)
class UserRecord:
    """Snapshot of a user as resolved from the credential store."""
    id: str
    name: str
    email: str
    password_hash: str
    role: str
    stand_id: Optional[str] = None
    last_logout_at: Optional[dt.datetime] = None

    @classmethod
    def from_model(cls, user: User) -> "UserRecord":
        return cls(
            id=str(user.id),
            name=user.name,
            email=user.email,
            password_hash=user.password_hash,
            role=user.role,
            stand_id=user.company_stand_id,
            last_logout_at=user.last_logout_at,
        )

    def token_claims(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "standID": self.stand_id,
        }


def parse_uuid(value: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(value))
    except (ValueError, TypeError):
        return None


class CredentialStore(ABC):
    """Keyed-record access to user credentials."""

    @abstractmethod
    async def resolve_by_identifier(self, identifier: str) -> Optional[UserRecord]:
        """Find a user whose name or email equals `identifier`."""

    @abstractmethod
    async def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        """Fetch a user by id, None when absent."""

    @abstractmethod
    async def record_logout(self, user_id: str, when: dt.datetime) -> None:
        """Store the logout time used for soft revocation."""


class TortoiseCredentialStore(CredentialStore):
    """CredentialStore over the Tortoise `User` model."""

    async def resolve_by_identifier(self, identifier: str) -> Optional[UserRecord]:
        try:
            # A name match wins over an email match.
            users = await User.filter(Q(name=identifier) | Q(email=identifier)).limit(2)
        except BaseORMException as exc:
            raise DependencyError("credential lookup failed") from exc
        if not users:
            return None
        user = next((u for u in users if u.name == identifier), users[0])
        return UserRecord.from_model(user)

    async def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        pk = parse_uuid(user_id)
        if pk is None:
            return None
        try:
            user = await User.get_or_none(id=pk)
        except BaseORMException as exc:
            raise DependencyError("credential lookup failed") from exc
        return UserRecord.from_model(user) if user else None

    async def record_logout(self, user_id: str, when: dt.datetime) -> None:
        pk = parse_uuid(user_id)
        if pk is None:
            return
        try:
            await User.filter(id=pk).update(last_logout_at=when)
        except BaseORMException as exc:
            raise DependencyError("logout could not be recorded") from exc


class AuthService:
    """
    Login, token issuance and logout.

    Args:
        store: Credential store used on cache misses.
        cache: Identity cache (TTLCache or NullCache).
        hasher: Password hasher.
        tokens: Token issuer/verifier.
        cache_ttl: TTL in seconds for cached identities.
    """

    def __init__(self, store: CredentialStore, cache, hasher: PasswordHasher,
                 tokens: TokenService, cache_ttl: float = 3600):
        self.store = store
        self.cache = cache
        self.hasher = hasher
        self.tokens = tokens
        self.cache_ttl = cache_ttl

    async def resolve(self, identifier: str) -> Optional[UserRecord]:
        """Read-through lookup by name or email."""
        record = self.cache.get(identifier)
        if record is not None:
            return record
        record = await self.store.resolve_by_identifier(identifier)
        if record is not None:
            self.cache.set(identifier, record, self.cache_ttl)
        return record

    async def authenticate(self, identifier: str, password: str) -> UserRecord:
        """
        Verify credentials and return the matching user.

        Raises:
            AuthenticationError: Unknown identifier or wrong password. Both
                cases produce the same message.
        """
        record = await self.resolve(identifier)
        if record is None:
            logger.info("[auth] login failed: unknown identifier %r", identifier)
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not await self.hasher.verify(password, record.password_hash):
            logger.info("[auth] login failed: bad password for user id=%s", record.id)
            raise AuthenticationError(INVALID_CREDENTIALS)
        logger.info("[auth] login ok: id=%s role=%s", record.id, record.role)
        return record

    def issue_token(self, record: UserRecord) -> str:
        return self.tokens.issue(record.token_claims())

    async def logout(self, user_id: str) -> dt.datetime:
        """Record the logout time; older tokens for this user stop verifying."""
        when = dt.datetime.now(dt.timezone.utc)
        await self.store.record_logout(user_id, when)
        return when

    def forget(self, *identifiers: Optional[str]) -> None:
        """Drop cached identities, e.g. after the user was edited or deleted."""
        for identifier in identifiers:
            if identifier:
                self.cache.delete(identifier)
