"""Health and readiness response schemas."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class HealthStatus(str, Enum):
    """Health of one dependency or of the service as a whole."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    """Result of probing one dependency."""

    status: HealthStatus
    message: str | None = None
    latency_ms: float | None = None
    details: dict[str, Any] | None = None


class HealthResponse(BaseModel):
    """Liveness: the process is up and serving requests."""

    status: HealthStatus = Field(..., description="Overall health status")
    version: str = Field(..., description="hrbridge version")
    environment: str = Field(..., description="Deployment environment")
    timestamp: datetime = Field(..., description="Check timestamp")

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "healthy",
                "version": "0.1.0",
                "environment": "production",
                "timestamp": "2026-01-30T12:00:00Z",
            }
        }
    }


class DatabaseHealthResponse(HealthResponse):
    """Local employee store connectivity."""

    database: ComponentHealth


class ReadinessResponse(HealthResponse):
    """Everything an employee sync depends on.

    ``token_cache`` covers the configured bearer token backend (a Redis
    round trip when Redis is configured). ``auth_circuit`` mirrors the
    token endpoint circuit breaker: half-open is degraded, open is
    unhealthy because every sync would fail fast.
    """

    database: ComponentHealth
    token_cache: ComponentHealth
    auth_circuit: ComponentHealth
