# app/models/__init__.py
"""
Database models module initialization.
Exports all Tortoise ORM models for convenient imports.

Models exported:
- User: Account, credentials and role
- Company / Stand / CompanyFiles: Company profile, stand and banner/poster
- Offer: Job offer posted by a company
- Video: Company video link
"""
from .user import User, Role, ROLES
from .company import Company, Stand, CompanyFiles
from .offer import Offer, Video
