from pydantic import BaseModel
from typing import Dict, Optional
from enum import Enum

class HealthStatus(str, Enum):
    """Health states reported by the probes"""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    READY = "ready"
    ALIVE = "alive"

class BasicHealthResponse(BaseModel):
    """Basic health check response"""
    status: HealthStatus
    service: str
    version: str
    environment: str
    framework: str
    timestamp: float
    
    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "service": "Landing CRM API",
                "version": "1.0.0",
                "environment": "development",
                "framework": "FastAPI + SQLAlchemy",
                "timestamp": 1699123456.789
            }
        }

class ReadinessResponse(BaseModel):
    """Readiness probe response"""
    status: HealthStatus
    timestamp: float
    components: Dict[str, HealthStatus] = {}

class LivenessResponse(BaseModel):
    """Liveness probe response"""
    status: HealthStatus
    timestamp: float
    uptime_seconds: Optional[float] = None
