# app/api/v1/routers/offers.py
import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.v1.deps import Identity, get_identity, require_role
from app.core.errors import AuthorizationError, NotFoundError, ValidationError
from app.models.company import Company
from app.models.offer import Offer
from app.models.user import User
from app.schemas.company import OfferIn
from app.services.identity import parse_uuid

router = APIRouter(prefix="/offers", tags=["offers"])

OFFER_FIELDS = ("position", "workplace_type", "location", "job_type", "description")


def _offer_to_dict(o: Offer) -> dict:
    return {
        "id": str(o.id),
        "companyID": str(o.company_id),
        "companyName": o.company_name,
        "position": o.position,
        "workplace_type": o.workplace_type,
        "location": o.location,
        "job_type": o.job_type,
        "description": o.description,
        "createdAt": o.created_at.isoformat() if o.created_at else None,
        "updatedAt": o.updated_at.isoformat() if o.updated_at else None,
    }


async def _get_owned_offer(offer_id: str, identity: Identity) -> Offer:
    pk = parse_uuid(offer_id)
    offer = await Offer.get_or_none(id=pk) if pk else None
    if not offer:
        raise NotFoundError("Oferta no encontrada")
    if str(offer.company_id) != identity.id:
        raise AuthorizationError()
    return offer


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_offer(body: OfferIn, identity: Identity = Depends(require_role("co"))):
    """
    Publish a job offer for the caller's company.
    The company name comes from the profile, or from the account when no
    profile exists yet.
    """
    if not body.position or not body.location or not body.description:
        raise ValidationError("Todos los campos son obligatorios")

    profile = await Company.get_or_none(owner_id=identity.id)
    if profile:
        company_name = profile.name
    else:
        account = await User.get_or_none(id=identity.id)
        company_name = account.company if account else None

    offer = await Offer.create(
        company_id=identity.id,
        company_name=company_name,
        position=body.position,
        workplace_type=body.workplace_type,
        location=body.location,
        job_type=body.job_type,
        description=body.description,
    )
    return {"message": "Oferta añadida con éxito", "id": str(offer.id)}


@router.get("/by-company")
async def get_company_offers(
    companyID: Optional[str] = Query(default=None),
    identity: Identity = Depends(get_identity),
):
    """A company gets its own offers; anyone else must name the company."""
    company_id = identity.id if identity.role == "co" else companyID
    if not company_id:
        raise ValidationError("El ID es obligatorio")
    pk = parse_uuid(company_id)
    if pk is None:
        return []
    rows = await Offer.filter(company_id=pk).order_by("-created_at")
    return [_offer_to_dict(o) for o in rows]


@router.get("/filter", dependencies=[Depends(get_identity)])
async def search_offers(
    position: Optional[str] = None,
    location: Optional[str] = None,
    job_type: Optional[str] = None,
    workplace_type: Optional[str] = None,
):
    qs = Offer.all()
    if position:
        qs = qs.filter(position__icontains=position)
    if location:
        qs = qs.filter(location__icontains=location)
    if job_type:
        qs = qs.filter(job_type=job_type)
    if workplace_type:
        qs = qs.filter(workplace_type=workplace_type)
    rows = await qs.order_by("-created_at")
    return [_offer_to_dict(o) for o in rows]


@router.put("/{offer_id}")
async def update_offer(offer_id: str, body: OfferIn, identity: Identity = Depends(require_role("co"))):
    offer = await _get_owned_offer(offer_id, identity)
    for field in OFFER_FIELDS:
        value = getattr(body, field)
        if value:
            setattr(offer, field, value)
    offer.updated_at = dt.datetime.now(dt.timezone.utc)
    await offer.save()
    return {"message": "Oferta actualizada con éxito", "offer": _offer_to_dict(offer)}


@router.delete("/{offer_id}")
async def delete_offer(offer_id: str, identity: Identity = Depends(require_role("co"))):
    offer = await _get_owned_offer(offer_id, identity)
    await offer.delete()
    return {"message": "Oferta eliminada con éxito"}
