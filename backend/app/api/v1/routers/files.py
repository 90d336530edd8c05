# app/api/v1/routers/files.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from app.api.v1.deps import get_blob_storage, require_self_or_admin
from app.core.errors import DependencyError, NotFoundError, ValidationError
from app.models.company import CompanyFiles
from app.models.user import User
from app.services.identity import parse_uuid
from app.services.storage import BlobStorage

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/files", tags=["files"])


def _files_to_dict(f: CompanyFiles) -> dict:
    return {
        "companyID": str(f.company_id),
        "banner": f.banner_url,
        "poster": f.poster_url,
        "updatedAt": f.updated_at.isoformat() if f.updated_at else None,
    }


async def _upload(blobs: BlobStorage, upload: UploadFile, folder: str):
    return await blobs.upload(
        await upload.read(),
        upload.filename or folder,
        folder,
        upload.content_type or "application/octet-stream",
    )


async def _discard(blobs: BlobStorage, blob_ids: list[str]) -> None:
    """Best-effort delete; a blob that cannot be removed is only logged."""
    for blob_id in blob_ids:
        try:
            await blobs.delete(blob_id)
        except DependencyError:
            logger.warning("[files] could not delete blob %s", blob_id)


@router.put("/{company_id}", dependencies=[Depends(require_self_or_admin("company_id"))])
async def update_files(
    company_id: str,
    banner: Optional[UploadFile] = File(default=None),
    poster: Optional[UploadFile] = File(default=None),
    blobs: BlobStorage = Depends(get_blob_storage),
):
    """
    Replace a company's banner and/or poster.

    A file that is not sent keeps its current value. The record is created
    the first time files are uploaded for the company. Previous blobs are
    deleted only once the record points at the new ones; if anything fails
    before that, the new blobs are removed instead.
    """
    if banner is None and poster is None:
        raise ValidationError("Hay que enviar un banner o un póster")
    pk = parse_uuid(company_id)
    if pk is None or not await User.filter(id=pk, role="co").exists():
        raise NotFoundError("Empresa no encontrada")

    record, _ = await CompanyFiles.get_or_create(company_id=pk)
    uploaded, replaced = [], []
    try:
        if banner is not None:
            blob = await _upload(blobs, banner, "banners")
            uploaded.append(blob.id)
            replaced.append(record.banner_id)
            record.banner_id, record.banner_url = blob.id, blob.url
        if poster is not None:
            blob = await _upload(blobs, poster, "posters")
            uploaded.append(blob.id)
            replaced.append(record.poster_id)
            record.poster_id, record.poster_url = blob.id, blob.url
        await record.save()
    except Exception:
        await _discard(blobs, uploaded)
        raise

    await _discard(blobs, [blob_id for blob_id in replaced if blob_id])
    return {"message": "Archivos actualizados correctamente", "files": _files_to_dict(record)}


@router.get("/{company_id}", dependencies=[Depends(require_self_or_admin("company_id"))])
async def get_files(company_id: str):
    pk = parse_uuid(company_id)
    record = await CompanyFiles.get_or_none(company_id=pk) if pk else None
    if not record:
        raise NotFoundError("No hay archivos para esta empresa")
    return _files_to_dict(record)
