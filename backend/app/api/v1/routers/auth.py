# app/api/v1/routers/auth.py
from fastapi import APIRouter, Depends, Request, Response

from app.api.v1.deps import (
    Identity,
    get_auth_service,
    get_identity,
    get_optional_identity,
)
from app.core.errors import ValidationError
from app.schemas.auth import IdentityOut, LoginRequest, LoginResponse, UserOut
from app.services.identity import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_session_cookie(request: Request, response: Response, token: str, max_age: int) -> None:
    cfg = request.app.state.settings
    response.set_cookie(
        cfg.auth_cookie_name,
        token,
        max_age=max_age,
        httponly=True,  # Not readable from JS
        secure=cfg.cookie_secure,
        samesite=cfg.cookie_samesite,
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
):
    """
    Authenticate by name or email and password.

    The token is returned in the body and also set as an HttpOnly cookie,
    so both browser and API clients are served. Cookie writing is
    best-effort: the token is already issued when it happens.

    Returns:
        dict: message, token and the user's public fields

    Raises:
        ValidationError (400): nameOrEmail or password missing
        AuthenticationError (401): Unknown identifier or wrong password
    """
    identifier = (payload.nameOrEmail or "").strip()
    if not identifier or not payload.password:
        raise ValidationError("Faltan datos: nameOrEmail y password son requeridos")

    user = await auth.authenticate(identifier, payload.password)
    token = auth.issue_token(user)
    _set_session_cookie(request, response, token, int(auth.tokens.ttl.total_seconds()))
    return {
        "message": "Inicio de sesión exitoso",
        "token": token,
        "user": UserOut(id=user.id, name=user.name, email=user.email, role=user.role, standID=user.stand_id),
    }


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    identity: Identity | None = Depends(get_optional_identity),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Clear the session cookie.

    When the request carries a valid token the logout time is stored on the
    user; with revocation checking on, every token issued before it stops
    working. Without a valid token only the cookie is cleared.
    """
    if identity is not None:
        await auth.logout(identity.id)
    cfg = request.app.state.settings
    response.delete_cookie(
        cfg.auth_cookie_name,
        httponly=True,
        secure=cfg.cookie_secure,
        samesite=cfg.cookie_samesite,
    )
    return {"message": "Sesión cerrada correctamente"}


@router.get("/role")
async def get_role(identity: Identity = Depends(get_identity)):
    """Return the caller's role."""
    return {"role": identity.role}


@router.get("/me", response_model=IdentityOut)
async def me(identity: Identity = Depends(get_identity)):
    return IdentityOut(
        id=identity.id,
        name=identity.name,
        email=identity.email,
        role=identity.role,
        standID=identity.stand_id,
    )
