# app/schemas/company.py
"""
Pydantic schemas for company profile, stand, offers and videos.
"""
from typing import List, Optional
from pydantic import BaseModel


class LinkIn(BaseModel):
    additionalButtonTitle: Optional[str] = None
    additionalButtonLink: Optional[str] = None


class CompanyCreateIn(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    additional_information: Optional[str] = None
    email: Optional[str] = None
    sector: Optional[str] = None
    links: Optional[List[LinkIn]] = None


class CompanyUpdateIn(BaseModel):
    description: Optional[str] = None
    additional_information: Optional[str] = None
    sector: Optional[str] = None
    links: Optional[List[LinkIn]] = None


class StandIn(BaseModel):
    URLStand: Optional[str] = None
    URLRecep: Optional[str] = None


class DocumentRef(BaseModel):
    fileName: str


class DocumentsKeepIn(BaseModel):
    documentsToKeep: Optional[List[DocumentRef]] = None


class OfferIn(BaseModel):
    position: Optional[str] = None
    workplace_type: Optional[str] = None
    location: Optional[str] = None
    job_type: Optional[str] = None
    description: Optional[str] = None


class VideoIn(BaseModel):
    url: Optional[str] = None
