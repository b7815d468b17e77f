"""Health check routes."""

from fastapi import APIRouter, Depends

from ... import __version__
from ...errors import StorageError
from ..services.pages import get_store

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    return {"status": "healthy", "service": "leadpage-engine-api", "version": __version__}


@router.get("/ready")
async def ready(store=Depends(get_store)):
    """Readiness check - verifies database is accessible."""
    try:
        store.ping()
        return {"status": "ready"}
    except StorageError as e:
        return {"status": "not_ready", "detail": str(e)}
