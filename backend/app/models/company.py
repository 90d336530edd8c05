# app/models/company.py
"""
Company profile and stand models.
A `co` user owns at most one profile; the stand is keyed by the standID
generated for the company when its account was created.
"""
import uuid
from tortoise import fields, models


class Company(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    owner = fields.OneToOneField(
        "models.User",
        related_name="company_profile",
        on_delete=fields.CASCADE,
    )  # companyID
    name = fields.CharField(max_length=256)
    description = fields.TextField()
    additional_information = fields.TextField(default="")
    email = fields.CharField(max_length=256, null=True)
    sector = fields.CharField(max_length=128, null=True)
    links = fields.JSONField(default=list)  # [{additionalButtonTitle, additionalButtonLink}]
    documents = fields.JSONField(default=list)  # [{fileName, url, blobId}]
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "companies"


class Stand(models.Model):
    id = fields.CharField(max_length=64, pk=True)  # standID
    company = fields.ForeignKeyField("models.User", related_name="stands", on_delete=fields.CASCADE)
    url_stand = fields.CharField(max_length=512)
    url_recep = fields.CharField(max_length=512)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "stands"


class CompanyFiles(models.Model):
    """Banner and poster of a company, stored in the blob store."""
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    company = fields.OneToOneField("models.User", related_name="files", on_delete=fields.CASCADE)
    banner_id = fields.CharField(max_length=512, null=True)
    banner_url = fields.CharField(max_length=1024, null=True)
    poster_id = fields.CharField(max_length=512, null=True)
    poster_url = fields.CharField(max_length=1024, null=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "company_files"
