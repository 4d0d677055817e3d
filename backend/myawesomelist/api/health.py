"""
Health check endpoints
"""

from fastapi import APIRouter, Depends

from myawesomelist.api.deps import get_awesome
from myawesomelist.config import settings
from myawesomelist.database.postgres import ping
from myawesomelist.services.awesome import Awesome
from myawesomelist.services.collection_store import DATABASE_ERRORS
from myawesomelist.utils.datetime import utc_now

router = APIRouter()


@router.get("/health")
async def health_check():
    """Simple API health check."""
    return {
        "status": "healthy",
        "timestamp": utc_now().isoformat(),
        "service": settings.APP_NAME,
    }


@router.get("/health/db")
async def database_health(awesome: Awesome = Depends(get_awesome)):
    """PostgreSQL health check."""
    try:
        await ping(awesome.pool)
    except DATABASE_ERRORS as exc:
        return {
            "status": "unhealthy",
            "database": "disconnected",
            "error": str(exc),
            "timestamp": utc_now().isoformat(),
        }

    return {
        "status": "healthy",
        "database": "connected",
        "timestamp": utc_now().isoformat(),
    }
