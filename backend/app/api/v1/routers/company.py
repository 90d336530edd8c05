# app/api/v1/routers/company.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile, status

from app.api.v1.deps import (
    Identity,
    get_blob_storage,
    require_role,
    require_self_or_admin,
)
from app.core.errors import AuthorizationError, DependencyError, NotFoundError, ValidationError
from app.models.company import Company, Stand
from app.models.user import User
from app.schemas.company import (
    CompanyCreateIn,
    CompanyUpdateIn,
    DocumentsKeepIn,
    LinkIn,
    StandIn,
)
from app.services.identity import parse_uuid
from app.services.storage import BlobStorage

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/company", tags=["company"])

COMPANY_NOT_FOUND = "Empresa no encontrada"


def _company_to_dict(c: Company) -> dict:
    return {
        "id": str(c.id),
        "companyID": str(c.owner_id),
        "name": c.name,
        "description": c.description,
        "additional_information": c.additional_information,
        "email": c.email,
        "sector": c.sector,
        "links": c.links,
        "documents": [{"fileName": d["fileName"], "url": d["url"]} for d in c.documents],
        "updatedAt": c.updated_at.isoformat() if c.updated_at else None,
    }


def _validate_links(links: Optional[List[LinkIn]]) -> list[dict]:
    """Every link needs both a title and a URL."""
    if not links:
        return []
    if not all(link.additionalButtonTitle and link.additionalButtonLink for link in links):
        raise ValidationError("Cada link debe tener un título y una URL válida")
    return [link.model_dump() for link in links]


async def _discard_blobs(blobs: BlobStorage, blob_ids: list[str]) -> None:
    for blob_id in blob_ids:
        try:
            await blobs.delete(blob_id)
        except DependencyError:
            logger.warning("[company] could not roll back blob %s", blob_id)


async def _get_company_or_404(company_id: str) -> Company:
    pk = parse_uuid(company_id)
    company = await Company.get_or_none(owner_id=pk) if pk else None
    if not company:
        raise NotFoundError(COMPANY_NOT_FOUND)
    return company


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_company_info(body: CompanyCreateIn, identity: Identity = Depends(require_role("co"))):
    """
    Create the caller's company profile. A company has a single profile.

    Raises:
        ValidationError (400): name/description missing, invalid links, or
            a profile already exists
    """
    if not body.name or not body.description:
        raise ValidationError("Nombre y descripción son obligatorios")
    links = _validate_links(body.links)
    if await Company.filter(owner_id=identity.id).exists():
        raise ValidationError("La empresa ya tiene información registrada")

    company = await Company.create(
        owner_id=identity.id,
        name=body.name,
        description=body.description,
        additional_information=body.additional_information or "",
        email=body.email,
        sector=body.sector,
        links=links,
        documents=[],
    )
    await User.filter(id=identity.id).update(information=True)
    return {"message": "Empresa añadida con éxito", "id": str(company.id)}


@router.get("")
async def get_own_company(identity: Identity = Depends(require_role("co"))):
    return _company_to_dict(await _get_company_or_404(identity.id))


@router.post("/stand")
async def add_stand_and_receptionist(body: StandIn, identity: Identity = Depends(require_role("co"))):
    """Save the stand and receptionist chosen by the company, keyed by its standID."""
    if not body.URLStand or not body.URLRecep:
        raise ValidationError("Hay que seleccionar un Stand y un Recepcionista")
    if not identity.stand_id:
        raise ValidationError("La empresa no tiene un stand asignado")

    await Stand.update_or_create(
        id=identity.stand_id,
        defaults={"company_id": identity.id, "url_stand": body.URLStand, "url_recep": body.URLRecep},
    )
    return {"message": "Stand y Recepcionista guardados correctamente"}


@router.get("/{company_id}")
async def get_company(company_id: str, identity: Identity = Depends(require_role("admin", "co"))):
    # A company may only read its own profile through this route.
    if not identity.is_admin and company_id != identity.id:
        raise AuthorizationError()
    return _company_to_dict(await _get_company_or_404(company_id))


@router.put("/{company_id}", dependencies=[Depends(require_self_or_admin("company_id"))])
async def update_company(company_id: str, body: CompanyUpdateIn):
    company = await _get_company_or_404(company_id)
    if body.links is not None:
        company.links = _validate_links(body.links)
    if body.description:
        company.description = body.description
    if body.additional_information is not None:
        company.additional_information = body.additional_information
    if body.sector is not None:
        company.sector = body.sector
    await company.save()
    return {"message": "Información de la empresa actualizada", "company": _company_to_dict(company)}


@router.post("/{company_id}/documents", dependencies=[Depends(require_self_or_admin("company_id"))])
async def upload_documents(
    company_id: str,
    documents: List[UploadFile] = File(...),
    blobs: BlobStorage = Depends(get_blob_storage),
):
    """
    Upload documents to the blob store and append them to the profile.

    Uploads and the profile write are not atomic: if any upload or the
    profile save fails, the blobs already stored are removed again on a
    best-effort basis.
    """
    company = await _get_company_or_404(company_id)
    stored = []
    try:
        for document in documents:
            data = await document.read()
            blob = await blobs.upload(
                data,
                document.filename or "document",
                f"company_documents/{company_id}",
                document.content_type or "application/octet-stream",
            )
            stored.append({"fileName": document.filename, "url": blob.url, "blobId": blob.id})

        company.documents = list(company.documents) + stored
        await company.save()
    except Exception:
        await _discard_blobs(blobs, [doc["blobId"] for doc in stored])
        raise
    return {
        "message": "Documentos subidos correctamente",
        "documents": [{"fileName": d["fileName"], "url": d["url"]} for d in company.documents],
    }


@router.put("/{company_id}/documents", dependencies=[Depends(require_self_or_admin("company_id"))])
async def prune_documents(
    company_id: str,
    body: DocumentsKeepIn,
    blobs: BlobStorage = Depends(get_blob_storage),
):
    """
    Keep only the listed documents; delete the rest from the blob store.
    A blob that cannot be deleted is logged and still dropped from the profile.
    """
    if body.documentsToKeep is None:
        raise ValidationError("documentsToKeep es obligatorio")
    company = await _get_company_or_404(company_id)

    keep_names = {ref.fileName for ref in body.documentsToKeep}
    kept, dropped = [], []
    for doc in company.documents:
        (kept if doc["fileName"] in keep_names else dropped).append(doc)

    for doc in dropped:
        try:
            await blobs.delete(doc["blobId"])
        except DependencyError:
            logger.warning("[company] could not delete document %s of company %s", doc["fileName"], company_id)

    company.documents = kept
    await company.save()
    return {
        "message": "Documentos actualizados correctamente",
        "documents": [{"fileName": d["fileName"], "url": d["url"]} for d in kept],
    }
