"""
Services Module

- identity: Credential store access, login and logout
- storage: Blob storage for uploaded company files
"""
from .identity import AuthService, CredentialStore, TortoiseCredentialStore, UserRecord
from .storage import BlobStorage, LocalBlobStorage, StoredBlob

__all__ = [
    "AuthService",
    "CredentialStore",
    "TortoiseCredentialStore",
    "UserRecord",
    "BlobStorage",
    "LocalBlobStorage",
    "StoredBlob",
]
