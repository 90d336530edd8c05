# app/core/bootstrap.py
"""
Bootstrap module for application initialization.
Creates the first admin on startup; users can only be created by an admin,
so without one nobody could ever log in.
"""
import logging

from app.config import Settings
from app.core.security import PasswordHasher
from app.models.user import Role, User

logger = logging.getLogger("uvicorn.error")


async def ensure_default_admin(config: Settings, hasher: PasswordHasher) -> User | None:
    """
    If no admin exists, create one from ADMIN_NAME / ADMIN_EMAIL / ADMIN_PASSWORD.

    Nothing is created when ADMIN_PASSWORD is unset (no default weak password).
    Returns the created admin, or None.
    """
    if await User.filter(role=Role.ADMIN.value).exists():
        return None

    if not config.admin_password:
        logger.warning("[bootstrap] No admin present, but ADMIN_PASSWORD not set -> skip creating default admin.")
        return None

    # The name may already belong to another account; pick a free variant.
    admin_name = base_name = config.admin_name
    suffix = 1
    while await User.filter(name=admin_name).exists():
        suffix += 1
        admin_name = f"{base_name}{suffix}"

    if await User.filter(email=config.admin_email).exists():
        logger.warning("[bootstrap] ADMIN_EMAIL %s already in use -> skip creating default admin.", config.admin_email)
        return None

    u = await User.create(
        name=admin_name,
        email=config.admin_email,
        password_hash=await hasher.hash(config.admin_password),
        role=Role.ADMIN.value,
    )
    logger.warning("[bootstrap] Created default admin -> name=%s email=%s id=%s", u.name, u.email, u.id)
    return u
