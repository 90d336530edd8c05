# app/models/user.py
"""
Database model for users.
Represents an account on the platform: login credentials, role and the
role-specific profile fields (company data for `co`, student data for `visitor`).
"""
import uuid
from enum import Enum

from tortoise import fields, models


class Role(str, Enum):
    ADMIN = "admin"
    CO = "co"          # Company
    VISITOR = "visitor"


ROLES = tuple(r.value for r in Role)


class User(models.Model):
    """
    User database model.

    The `id` is the join key used by every other collection (offers, videos,
    company profiles and files reference it as `companyID`).

    Security:
    - Password is stored as a bcrypt hash, never in plain text
    - Role is fixed at creation
    - last_logout_at drives soft revocation of older tokens
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    name = fields.CharField(max_length=128, index=True)  # Login identifier (unique among users)
    email = fields.CharField(max_length=256, unique=True)  # Secondary login identifier
    password_hash = fields.CharField(max_length=255)
    role = fields.CharField(max_length=16)  # "admin", "co" or "visitor"

    # Role "co"
    company = fields.CharField(max_length=256, null=True)
    cif = fields.CharField(max_length=32, null=True)
    company_stand_id = fields.CharField(max_length=64, null=True)  # Generated at creation

    # Role "visitor"
    dni = fields.CharField(max_length=32, null=True)
    studies = fields.CharField(max_length=256, null=True)

    information = fields.BooleanField(default=False)  # Company profile filled in
    last_logout_at = fields.DatetimeField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"
