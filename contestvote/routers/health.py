"""Health check endpoints."""
import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from contestvote.config import get_settings
from contestvote.database import engine
from contestvote.version import APP_VERSION

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "error", "detail": "Database connection failed"},
        )

    settings = get_settings()
    return {
        "status": "ok",
        "database": "connected",
        "version": APP_VERSION,
        "environment": settings.environment,
        "media": "configured" if settings.media_configured else "disabled",
        "payments": "configured" if settings.payments_configured else "disabled",
    }


@router.get("/heartbeat")
async def heartbeat():
    """Liveness ping used to keep hosted instances awake."""
    return {"status": "alive"}
