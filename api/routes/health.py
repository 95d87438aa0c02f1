"""Health check route"""

from fastapi import APIRouter
import logging

from adapters import mongo_adapter
from app.config import settings
from api.responses import HealthResponse

router = APIRouter(tags=["Health"])
logger = logging.getLogger("lifetrack.api.health")


@router.get("/health-check", response_model=HealthResponse)
def health_check():
    """Basic health check endpoint with database connectivity"""
    connected = mongo_adapter.is_connected()
    if not connected:
        logger.warning("Health check: database unavailable")
    return HealthResponse(
        status="ok",
        service="LifeTrack",
        version=settings.app_version,
        database="connected" if connected else "unavailable",
    )
