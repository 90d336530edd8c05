# app/api/v1/routers/admin.py
from fastapi import APIRouter, Depends, Request

from app.api.v1.deps import require_role

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/identity-cache", dependencies=[Depends(require_role("admin"))])
async def identity_cache_stats(request: Request):
    """
    Identity cache counters (admin only): size, hits, misses, expired and
    evicted entries. Useful to tune the TTL and size limits.
    """
    cache = request.app.state.identity_cache
    cache.purge_expired()
    return cache.stats()


@router.delete("/identity-cache", dependencies=[Depends(require_role("admin"))])
async def clear_identity_cache(request: Request):
    """Drop every cached identity; the next logins read from the store."""
    request.app.state.identity_cache.clear()
    return {"message": "Caché vaciada"}
