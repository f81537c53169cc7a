from fastapi import APIRouter

from screencast.core.config import settings

router = APIRouter(tags=["health"])

@router.get("/health", summary="Liveness")
def health():
    return {"status": "ok", "app": settings.APP_NAME, "env": settings.ENV}
