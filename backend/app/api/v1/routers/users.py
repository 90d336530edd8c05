# app/api/v1/routers/users.py
import uuid

from fastapi import APIRouter, Depends, status

from app.api.v1.deps import (
    Identity,
    get_auth_service,
    get_identity,
    require_role,
    require_self_or_admin,
)
from app.core.errors import NotFoundError, ValidationError
from app.models.user import ROLES, Role, User
from app.schemas.users import UserCreateIn, UserUpdateIn
from app.services.identity import AuthService, parse_uuid

router = APIRouter(prefix="/users", tags=["users"])

USER_NOT_FOUND = "Usuario no encontrado"


def _user_to_dict(u: User) -> dict:
    """
    Convert a User to its API representation.
    The password hash never leaves the server.
    """
    data = {
        "id": str(u.id),
        "name": u.name,
        "email": u.email,
        "role": u.role,
        "information": u.information,
        "createdAt": u.created_at.isoformat() if u.created_at else None,
    }
    if u.role == Role.CO.value:
        data.update(company=u.company, cif=u.cif, companyStandId=u.company_stand_id)
    elif u.role == Role.VISITOR.value:
        data.update(dni=u.dni, studies=u.studies)
    return data


async def _get_user_or_404(user_id: str) -> User:
    pk = parse_uuid(user_id)
    user = await User.get_or_none(id=pk) if pk else None
    if not user:
        raise NotFoundError(USER_NOT_FOUND)
    return user


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_role("admin"))])
async def create_user(body: UserCreateIn, auth: AuthService = Depends(get_auth_service)):
    """
    Create a user account (admin only).

    Role-specific fields are required at creation:
        - co: company and cif (a stand id is generated)
        - visitor: dni and studies

    Raises:
        ValidationError (400): Missing fields, unknown role, email or name in use
    """
    if not body.name or not body.email or not body.password or not body.role:
        raise ValidationError("Faltan datos.")
    if body.role not in ROLES:
        raise ValidationError("El rol no es válido.")

    extra = {}
    if body.role == Role.CO.value:
        if not body.company or not body.cif:
            raise ValidationError("Faltan campos de empresa y/o CIF para el CO.")
        extra = {"company": body.company, "cif": body.cif, "company_stand_id": str(uuid.uuid4())}
    elif body.role == Role.VISITOR.value:
        if not body.dni or not body.studies:
            raise ValidationError("Faltan campos de DNI y/o estudios para el visitante.")
        extra = {"dni": body.dni, "studies": body.studies}

    if await User.filter(email=body.email).exists():
        raise ValidationError("El correo ya está en uso.")
    if await User.filter(name=body.name).exists():
        raise ValidationError("El nombre ya está en uso.")

    u = await User.create(
        name=body.name,
        email=body.email,
        password_hash=await auth.hasher.hash(body.password),
        role=body.role,
        **extra,
    )
    return {"message": "Usuario creado exitosamente.", "id": str(u.id)}


@router.get("", dependencies=[Depends(get_identity)])
async def list_users():
    rows = await User.all().order_by("created_at")
    return [_user_to_dict(u) for u in rows]


@router.get("/{user_id}", dependencies=[Depends(get_identity)])
async def get_user(user_id: str):
    return _user_to_dict(await _get_user_or_404(user_id))


@router.put("/{user_id}", dependencies=[Depends(require_self_or_admin("user_id"))])
async def update_user(
    user_id: str,
    body: UserUpdateIn,
    auth: AuthService = Depends(get_auth_service),
):
    """
    Update a user (the user themselves or an admin).

    Only provided fields change. The role is fixed at creation; sending a
    different one is rejected. Cached identities for the old and new
    name/email are dropped so the next login reads fresh data.
    """
    u = await _get_user_or_404(user_id)
    old_name, old_email = u.name, u.email

    if body.role is not None and body.role != u.role:
        raise ValidationError("El rol no se puede modificar.")

    if body.email and body.email != u.email:
        if await User.filter(email=body.email).exclude(id=u.id).exists():
            raise ValidationError("El correo ya está en uso.")
        u.email = body.email
    if body.name and body.name != u.name:
        if await User.filter(name=body.name).exclude(id=u.id).exists():
            raise ValidationError("El nombre ya está en uso.")
        u.name = body.name
    if body.password:
        u.password_hash = await auth.hasher.hash(body.password)

    if u.role == Role.CO.value:
        u.company = body.company or u.company
        u.cif = body.cif or u.cif
    elif u.role == Role.VISITOR.value:
        u.dni = body.dni or u.dni
        u.studies = body.studies or u.studies

    await u.save()
    auth.forget(old_name, old_email, u.name, u.email)
    return {"message": "Usuario actualizado exitosamente"}


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    current: Identity = Depends(require_role("admin")),
    auth: AuthService = Depends(get_auth_service),
):
    u = await _get_user_or_404(user_id)
    if str(u.id) == current.id:
        raise ValidationError("No puedes eliminar tu propia cuenta.")
    await u.delete()
    auth.forget(u.name, u.email)
    return {"message": "Usuario eliminado exitosamente"}
