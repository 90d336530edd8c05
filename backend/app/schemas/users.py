# app/schemas/users.py
"""
Pydantic schemas for user management endpoints.
"""
from typing import Optional
from pydantic import BaseModel


class UserCreateIn(BaseModel):
    """
    Request model for creating a user (admin only).
    Role-specific fields are checked by the handler:
    - co: company and cif required
    - visitor: dni and studies required
    """
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    company: Optional[str] = None
    cif: Optional[str] = None
    dni: Optional[str] = None
    studies: Optional[str] = None


class UserUpdateIn(BaseModel):
    """Partial update; only provided fields change. Role cannot change."""
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    company: Optional[str] = None
    cif: Optional[str] = None
    dni: Optional[str] = None
    studies: Optional[str] = None
