"""
Health check and system status routes
"""

from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ...config import Settings, get_settings
from ...database.connection import DatabaseManager
from ..dependencies import get_database_manager

router = APIRouter(tags=["System"])


@router.get("/health")
async def health_check(
    db_manager: DatabaseManager = Depends(get_database_manager),
    settings: Settings = Depends(get_settings),
):
    """Health check endpoint with datastore probe"""
    db_healthy = await db_manager.health_check()
    content = {
        "status": "ok" if db_healthy else "error",
        "database": "connected" if db_healthy else "disconnected",
        "service": settings.app_name,
        "version": settings.app_version,
        "timestamp": datetime.now().isoformat(),
    }
    return JSONResponse(status_code=200 if db_healthy else 503, content=content)
