# app/services/storage.py
"""
Blob storage for uploaded company files (documents, banners, posters).

Handlers only see the BlobStorage interface: upload returns an opaque id
plus a public URL, delete takes that id. LocalBlobStorage keeps the files
on disk under the configured upload directory.
"""
from __future__ import annotations

import asyncio
import logging
import re
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from app.core.errors import DependencyError

logger = logging.getLogger("uvicorn.error")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(frozen=True)
class StoredBlob:
    id: str
    url: str


class BlobStorage(ABC):
    @abstractmethod
    async def upload(self, data: bytes, filename: str, folder: str,
                     content_type: str = "application/octet-stream") -> StoredBlob:
        """Store content and return its id and URL."""

    @abstractmethod
    async def delete(self, blob_id: str) -> bool:
        """Delete content. Returns False when it did not exist."""


class LocalBlobStorage(BlobStorage):
    """Store blobs on the local filesystem."""

    def __init__(self, base_path: str, url_prefix: str = "/uploads"):
        self.base_path = Path(base_path).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.url_prefix = url_prefix.rstrip("/")

    def _blob_path(self, blob_id: str) -> Path:
        path = (self.base_path / blob_id).resolve()
        if self.base_path not in path.parents:
            raise ValueError(f"blob id outside storage root: {blob_id!r}")
        return path

    async def upload(self, data: bytes, filename: str, folder: str,
                     content_type: str = "application/octet-stream") -> StoredBlob:
        safe_name = _UNSAFE_CHARS.sub("_", Path(filename or "file").name) or "file"
        parts = [_UNSAFE_CHARS.sub("_", p) for p in folder.split("/")]
        safe_folder = "/".join(p for p in parts if p.strip(".")) or "misc"
        blob_id = f"{safe_folder}/{uuid.uuid4().hex}_{safe_name}"
        path = self._blob_path(blob_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(path.write_bytes, data)
        except OSError as exc:
            raise DependencyError(f"blob upload failed: {blob_id}") from exc
        logger.info("[storage] stored %s (%d bytes, %s)", blob_id, len(data), content_type)
        return StoredBlob(id=blob_id, url=f"{self.url_prefix}/{blob_id}")

    async def delete(self, blob_id: str) -> bool:
        try:
            path = self._blob_path(blob_id)
        except ValueError:
            logger.warning("[storage] refusing to delete %r", blob_id)
            return False
        if not path.exists():
            return False
        try:
            await asyncio.to_thread(path.unlink)
        except OSError as exc:
            raise DependencyError(f"blob delete failed: {blob_id}") from exc
        return True
