from fastapi import APIRouter, HTTPException
import time

from config.settings import get_settings
from utils.logging import get_logger
from models.schemas.responses.health import (
    BasicHealthResponse,
    ReadinessResponse,
    LivenessResponse,
    HealthStatus,
)
from config.database import test_connection

router = APIRouter()
logger = get_logger(__name__)
settings = get_settings()

_started_at = time.time()


@router.get("/", response_model=BasicHealthResponse)
async def health_check():
    """Basic health check endpoint"""
    return BasicHealthResponse(
        status=HealthStatus.HEALTHY,
        service=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENV,
        framework="FastAPI + SQLAlchemy",
        timestamp=time.time(),
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check():
    db_connected = await test_connection()
    if not db_connected:
        logger.error("Readiness check failed: database not reachable")
        raise HTTPException(status_code=503, detail="Service not ready")
    return ReadinessResponse(
        status=HealthStatus.READY,
        timestamp=time.time(),
        components={"database": HealthStatus.HEALTHY},
    )


@router.get("/live", response_model=LivenessResponse)
async def liveness_check():
    """Kubernetes liveness probe"""
    now = time.time()
    return LivenessResponse(status=HealthStatus.ALIVE, timestamp=now, uptime_seconds=now - _started_at)
