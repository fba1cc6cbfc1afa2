"""Health endpoint."""

from fastapi import APIRouter, Depends

from routes.deps import get_studio

router = APIRouter()


@router.get("/health")
def health(studio=Depends(get_studio)):
    return {
        "status": "ok",
        "ready": studio.ready,
        "name": studio.profile.system.name,
        "backends": list(studio.router.backends) if studio.router else [],
    }
