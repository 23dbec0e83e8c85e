from fastapi import APIRouter

from app.core.config import settings

router = APIRouter()


@router.get("/health")
async def health_check():
    return {"status": "ok", "message": "Server is running"}


@router.get("/")
async def root():
    return {
        "message": "Academic Portal API",
        "status": "running",
        "environment": settings.environment,
    }
