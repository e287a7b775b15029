"""
Health check endpoint (public)
"""

from fastapi import APIRouter

from sharexconnect.core.config import settings


router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    """Liveness probe for load balancers"""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }
