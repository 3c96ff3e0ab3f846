"""
Health Check API v1 Endpoints

Liveness and readiness endpoints.
"""

from datetime import datetime, timezone
from typing import Dict, Any

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import text

from sales_tracker.core.config import get_settings
from sales_tracker.core.container import get_container
from sales_tracker.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/health", tags=["health"])


@router.get("/")
async def health_check() -> Dict[str, Any]:
    """Basic health check endpoint."""
    settings = get_settings()
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/status")
async def detailed_status() -> Dict[str, Any]:
    """Status of the database and the shared LinkedIn session."""
    container = get_container()
    db_manager = container.get("db_manager")
    session_store = container.get("session_store")

    if db_manager is None or session_store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not initialized"
        )

    try:
        async with db_manager.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Status check failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service unhealthy"
        )

    return {
        "status": "healthy",
        "services": {
            "api": "healthy",
            "database": "healthy",
        },
        "linkedin_session_saved": session_store.has_saved(),
    }
