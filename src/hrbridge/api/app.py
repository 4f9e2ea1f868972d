"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from hrbridge import __version__
from hrbridge.api.middleware import (
    ErrorHandlingMiddleware,
    ProviderTokenMiddleware,
    RequestContextMiddleware,
    RequestLoggingMiddleware,
)
from hrbridge.api.middleware.errors import (
    http_exception_handler,
    request_validation_exception_handler,
)
from hrbridge.api.routers import health_router, metrics_router, v1_router
from hrbridge.config.settings import Settings, TokenCacheBackend, get_settings
from hrbridge.config.validation import validate_or_raise
from hrbridge.core.logging import get_logger, setup_logging
from hrbridge.remote.client import WorkforceApiClient

logger = get_logger("hrbridge.api")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    This is the application factory that assembles all components:
    - Middleware (in correct order)
    - Routers
    - Exception handlers
    - Lifespan management

    Args:
        settings: Optional settings override (useful for testing)

    Returns:
        Configured FastAPI application

    Example:
        # Production
        app = create_app()

        # Testing
        app = create_app(settings=Settings(ENVIRONMENT="test"))

        # Run with uvicorn
        uvicorn hrbridge.api.app:create_app --factory
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="hrbridge",
        description="HR provider to workforce API synchronization adapter",
        version=__version__,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=_lifespan,
    )

    # Store settings on app state for access in dependencies
    app.state.settings = settings

    _configure_exception_handlers(app)
    _configure_middleware(app, settings)
    _configure_routers(app)

    return app


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Startup validates configuration (aborting on errors), opens the
    database and creates the shared workforce API client. Shutdown
    releases them in reverse order.
    """
    settings: Settings = app.state.settings

    setup_logging(settings.log_level, json_format=settings.ENVIRONMENT == "production")
    validate_or_raise(settings)
    logger.info("hrbridge_starting", environment=settings.ENVIRONMENT, version=__version__)

    from hrbridge.db.config import close_db, init_db

    await init_db(settings, create_tables=settings.is_sqlite)
    logger.info("database_initialized", sqlite=settings.is_sqlite)

    http_client = httpx.AsyncClient(timeout=settings.REMOTE_HTTP_TIMEOUT_SECONDS)
    app.state.http_client = http_client
    app.state.remote_client = WorkforceApiClient.from_settings(settings, http_client)

    yield

    logger.info("hrbridge_stopping")

    await http_client.aclose()
    await close_db()

    if settings.TOKEN_CACHE_BACKEND == TokenCacheBackend.REDIS:
        from hrbridge.core.redis import close_redis

        await close_redis()


def _configure_exception_handlers(app: FastAPI) -> None:
    """Render framework-raised errors in the standard envelope."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)


def _configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure middleware stack.

    Middleware order (outermost to innermost execution):
    1. RequestContextMiddleware - Assigns request id, binds log context
    2. RequestLoggingMiddleware - Logs all requests, records HTTP metrics
    3. ErrorHandlingMiddleware - Converts exceptions to HTTP responses
    4. CORSMiddleware - Handles CORS (if configured)
    5. ProviderTokenMiddleware - Validates provider Bearer token

    Note: Middleware is added in reverse order because Starlette
    processes them from last-added to first-added.
    """
    app.add_middleware(ProviderTokenMiddleware)

    if settings.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestContextMiddleware)


def _configure_routers(app: FastAPI) -> None:
    """Configure API routers."""
    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(v1_router)
