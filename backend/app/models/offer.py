# app/models/offer.py
"""
Database models for job offers and company videos.
"""
import uuid
from tortoise import fields, models


class Offer(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    company = fields.ForeignKeyField("models.User", related_name="offers", on_delete=fields.CASCADE)
    company_name = fields.CharField(max_length=256, null=True)  # Denormalized for listings
    position = fields.CharField(max_length=256)
    workplace_type = fields.CharField(max_length=64, null=True)  # e.g. "remote", "on-site"
    location = fields.CharField(max_length=256)
    job_type = fields.CharField(max_length=64, null=True)  # e.g. "full-time"
    description = fields.TextField()
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(null=True)  # Only set by edits

    class Meta:
        table = "offers"


class Video(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    company = fields.ForeignKeyField("models.User", related_name="videos", on_delete=fields.CASCADE)
    url = fields.CharField(max_length=1024)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "videos"
