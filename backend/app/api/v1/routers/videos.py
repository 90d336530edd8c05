# app/api/v1/routers/videos.py
from fastapi import APIRouter, Depends, status

from app.api.v1.deps import Identity, require_role
from app.core.errors import ValidationError
from app.models.offer import Video
from app.schemas.company import VideoIn

router = APIRouter(prefix="/videos", tags=["videos"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_video(body: VideoIn, identity: Identity = Depends(require_role("co"))):
    if not body.url:
        raise ValidationError("La URL del video es obligatoria")
    video = await Video.create(company_id=identity.id, url=body.url)
    return {"message": "Video añadido con éxito", "id": str(video.id)}


@router.get("")
async def list_videos(identity: Identity = Depends(require_role("co"))):
    rows = await Video.filter(company_id=identity.id).order_by("created_at")
    return [{"id": str(v.id), "companyID": str(v.company_id), "url": v.url} for v in rows]
