"""Request logging middleware."""

import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from hrbridge.core.logging import get_logger
from hrbridge.observability.metrics import record_http_request

logger = get_logger("hrbridge.api.requests")

# Health and scrape endpoints logged at debug level
QUIET_PATHS = {"/health", "/health/db", "/health/ready", "/metrics"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware that logs every HTTP request and records HTTP metrics.

    Log level follows the response status: errors for 5xx, warnings for
    4xx, info otherwise. Health checks are logged at debug.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and log request/response."""
        start_time = time.perf_counter()

        response = await call_next(request)

        duration = time.perf_counter() - start_time
        self._log_request(request, response, duration)
        record_http_request(
            request.method, self._route_template(request), response.status_code, duration
        )
        return response

    def _log_request(self, request: Request, response: Response, duration: float) -> None:
        path = request.url.path
        status_code = response.status_code

        if path in QUIET_PATHS:
            level = logging.DEBUG
        elif status_code >= 500:
            level = logging.ERROR
        elif status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        logger.log(
            level,
            "http_request",
            method=request.method,
            path=path,
            provider=self._get_provider(path),
            status_code=status_code,
            duration_ms=round(duration * 1000, 2),
            client_ip=self._get_client_ip(request),
            user_agent=request.headers.get("User-Agent"),
        )

    def _get_provider(self, path: str) -> str | None:
        # /v1/{provider}/employees...
        parts = path.strip("/").split("/")
        if len(parts) >= 3 and parts[0] == "v1" and parts[2] == "employees":
            return parts[1].strip().lower()
        return None

    def _route_template(self, request: Request) -> str:
        route = request.scope.get("route")
        return getattr(route, "path", "unmatched")

    def _get_client_ip(self, request: Request) -> str | None:
        """Extract client IP from request, considering proxy headers."""
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            # First IP in the chain is the original client
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        if request.client:
            return request.client.host

        return None
