# app/schemas/auth.py
"""
Pydantic schemas for authentication endpoints.
Defines request/response models for login and the caller's identity.
"""
from typing import Optional
from pydantic import BaseModel


class LoginRequest(BaseModel):
    """
    Request model for the login endpoint.
    Both fields are optional here so a missing field is answered with 400
    by the handler instead of a schema error.
    """
    nameOrEmail: Optional[str] = None  # User name or email
    password: Optional[str] = None  # Plain text, only compared against the stored hash


class UserOut(BaseModel):
    """User details returned after login (no sensitive fields)."""
    id: str
    name: str
    email: str
    role: str
    standID: Optional[str] = None


class LoginResponse(BaseModel):
    message: str
    token: str  # Same value as the session cookie
    user: UserOut


class IdentityOut(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: str
    standID: Optional[str] = None
