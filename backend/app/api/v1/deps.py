# app/api/v1/deps.py
"""
Authorization gate.

Every protected route goes through `get_identity`: extract the token
(Authorization: Bearer first, then the session cookie), verify it, optionally
check it against the user's last logout, and attach the identity to the
request. Role and ownership checks are thin layers on top of that single
verify step.
"""
import datetime as dt
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, Request

from app.core.errors import AuthenticationError, AuthorizationError
from app.core.security import TokenError
from app.services.identity import AuthService
from app.services.storage import BlobStorage

logger = logging.getLogger("uvicorn.error")


@dataclass(frozen=True)
class Identity:
    """Trusted caller identity, available as request.state.identity."""
    id: str
    role: str
    issued_at: float
    name: Optional[str] = None
    email: Optional[str] = None
    stand_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth


def get_blob_storage(request: Request) -> BlobStorage:
    return request.app.state.blobs


def _extract_token(request: Request, authorization: str | None) -> str | None:
    # 1) Prioritize Authorization: Bearer xxx
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
        if token:
            return token
    # 2) Secondly the HttpOnly session cookie
    return request.cookies.get(request.app.state.settings.auth_cookie_name) or None


def _as_utc_timestamp(value: dt.datetime) -> float:
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value.timestamp()


async def _resolve_identity(request: Request, authorization: str | None) -> Identity:
    token = _extract_token(request, authorization)
    if not token:
        logger.info("[gate] rejected %s %s: missing", request.method, request.url.path)
        raise AuthenticationError()

    auth: AuthService = request.app.state.auth
    try:
        claims = auth.tokens.verify(token)
    except TokenError as exc:
        # The failure kind is only logged; the client always gets the same 401.
        logger.info("[gate] rejected %s %s: %s", request.method, request.url.path, exc.reason)
        raise AuthenticationError()

    if request.app.state.settings.revocation_check:
        user = await auth.store.get_by_id(claims.id)
        if user is None:
            logger.info("[gate] rejected %s %s: user gone", request.method, request.url.path)
            raise AuthenticationError()
        if user.last_logout_at and claims.issued_at < _as_utc_timestamp(user.last_logout_at):
            logger.info("[gate] rejected %s %s: revoked", request.method, request.url.path)
            raise AuthenticationError()

    identity = Identity(
        id=claims.id,
        role=claims.role,
        issued_at=claims.issued_at,
        name=claims.name,
        email=claims.email,
        stand_id=claims.stand_id,
    )
    request.state.identity = identity
    return identity


async def get_identity(
    request: Request,
    authorization: str | None = Header(default=None),
) -> Identity:
    """
    FastAPI dependency: the caller must present a valid token.

    Raises:
        AuthenticationError (401): Token missing, malformed, badly signed,
            expired or revoked. The response is identical in every case.
    """
    return await _resolve_identity(request, authorization)


async def get_optional_identity(
    request: Request,
    authorization: str | None = Header(default=None),
) -> Identity | None:
    """Like get_identity, but returns None instead of failing."""
    try:
        return await _resolve_identity(request, authorization)
    except AuthenticationError:
        return None


def require_role(*roles: str):
    """
    Build a dependency that requires a valid token AND one of `roles`.

    Usage:
        @router.post("/", dependencies=[Depends(require_role("co"))])
    """
    allowed = frozenset(roles)

    async def _require_role(identity: Identity = Depends(get_identity)) -> Identity:
        if identity.role not in allowed:
            raise AuthorizationError()
        return identity

    return _require_role


def require_self_or_admin(param: str = "user_id"):
    """
    Build a dependency that passes when the path parameter `param` is the
    caller's own id, or when the caller is an admin.
    """

    async def _require_self_or_admin(
        request: Request,
        identity: Identity = Depends(get_identity),
    ) -> Identity:
        if identity.is_admin or request.path_params.get(param) == identity.id:
            return identity
        raise AuthorizationError()

    return _require_self_or_admin
