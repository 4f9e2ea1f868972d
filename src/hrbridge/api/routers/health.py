"""Health and readiness endpoints.

- GET /health - liveness, no dependencies touched
- GET /health/db - local employee store
- GET /health/ready - database, token cache and token circuit breaker;
  503 when an employee sync could not succeed right now
"""

import time
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from hrbridge import __version__
from hrbridge.api.dependencies import get_remote_client
from hrbridge.api.schemas.health import (
    ComponentHealth,
    DatabaseHealthResponse,
    HealthResponse,
    HealthStatus,
    ReadinessResponse,
)
from hrbridge.config.settings import Settings, get_settings
from hrbridge.core.logging import get_logger
from hrbridge.db.config import get_db
from hrbridge.remote.circuit import CircuitState
from hrbridge.remote.client import WorkforceApiClient
from hrbridge.remote.token import RedisTokenCache

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


def _settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


@router.get("/health", response_model=HealthResponse, summary="Liveness check")
async def health_check(request: Request) -> HealthResponse:
    """Always 200 while the process serves requests."""
    return HealthResponse(
        status=HealthStatus.HEALTHY,
        version=__version__,
        environment=_settings(request).ENVIRONMENT,
        timestamp=datetime.now(UTC),
    )


@router.get("/health/db", response_model=DatabaseHealthResponse, summary="Database check")
async def health_db(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DatabaseHealthResponse:
    """Run ``SELECT 1`` against the employee store and report latency."""
    database = await _check_database(db)
    return DatabaseHealthResponse(
        status=database.status,
        version=__version__,
        environment=_settings(request).ENVIRONMENT,
        timestamp=datetime.now(UTC),
        database=database,
    )


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    responses={503: {"description": "A dependency of employee sync is unavailable"}},
)
async def health_ready(
    request: Request,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
    remote: Annotated[WorkforceApiClient, Depends(get_remote_client)],
) -> ReadinessResponse:
    """Check every dependency an employee sync needs."""
    database = await _check_database(db)
    token_cache = await _check_token_cache(remote)
    auth_circuit = _check_auth_circuit(remote)

    overall = _aggregate([database, token_cache, auth_circuit])
    if overall == HealthStatus.UNHEALTHY:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning(
            "readiness_check_failed",
            database=database.status.value,
            token_cache=token_cache.status.value,
            auth_circuit=auth_circuit.status.value,
        )

    return ReadinessResponse(
        status=overall,
        version=__version__,
        environment=_settings(request).ENVIRONMENT,
        timestamp=datetime.now(UTC),
        database=database,
        token_cache=token_cache,
        auth_circuit=auth_circuit,
    )


async def _check_database(db: AsyncSession) -> ComponentHealth:
    start = time.perf_counter()
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            message=f"Database unreachable: {str(e)[:100]}",
            latency_ms=_elapsed_ms(start),
        )
    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message="Employee store reachable",
        latency_ms=_elapsed_ms(start),
    )


async def _check_token_cache(remote: WorkforceApiClient) -> ComponentHealth:
    """Read the bearer token entry through the configured backend.

    For the Redis backend this is a real round trip, so a Redis outage
    shows up here before it fails a sync.
    """
    manager = remote.token_manager
    backend = "redis" if isinstance(manager.cache, RedisTokenCache) else "memory"

    start = time.perf_counter()
    try:
        token = await manager.cache.get(manager.cache_key)
    except Exception as e:
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            message=f"Token cache unreachable: {str(e)[:100]}",
            latency_ms=_elapsed_ms(start),
            details={"backend": backend},
        )
    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message="Redis token cache reachable" if backend == "redis" else "In-process token cache",
        latency_ms=_elapsed_ms(start),
        details={"backend": backend, "token_cached": token is not None},
    )


def _check_auth_circuit(remote: WorkforceApiClient) -> ComponentHealth:
    breaker = remote.token_manager.circuit_breaker
    if breaker is None:
        return ComponentHealth(status=HealthStatus.HEALTHY, message="Circuit breaker disabled")

    state = breaker.state
    details = {"state": state.value, "failure_count": breaker.failure_count}

    if state == CircuitState.OPEN:
        details["retry_in_seconds"] = round(breaker.seconds_until_retry(), 1)
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            message="Token endpoint failing, employee sync is short-circuited",
            details=details,
        )
    if state == CircuitState.HALF_OPEN:
        return ComponentHealth(
            status=HealthStatus.DEGRADED,
            message="Waiting on a trial token request",
            details=details,
        )
    return ComponentHealth(status=HealthStatus.HEALTHY, details=details)


def _aggregate(components: list[ComponentHealth]) -> HealthStatus:
    statuses = {c.status for c in components}
    if HealthStatus.UNHEALTHY in statuses:
        return HealthStatus.UNHEALTHY
    if HealthStatus.DEGRADED in statuses:
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY
