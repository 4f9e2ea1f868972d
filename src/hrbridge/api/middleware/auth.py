"""Provider authentication middleware."""

import hmac
import re
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from hrbridge.api.middleware.errors import build_error_response
from hrbridge.api.schemas.errors import ErrorCode
from hrbridge.config.settings import Settings, get_settings
from hrbridge.core.logging import get_logger

logger = get_logger(__name__)

# Only provider routes require a token
PROTECTED_PREFIX = "/v1/"

MIN_TOKEN_LENGTH = 10

_BEARER_PATTERN = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)


class ProviderTokenMiddleware(BaseHTTPMiddleware):
    """Middleware that validates the Bearer token sent by HR providers.

    Enabled by ``Settings.provider_auth_active``. The token must be at least
    ten characters and, when ``API_SECRET_KEY`` is configured, must match it.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and validate authentication."""
        settings = self._get_settings(request)
        if not settings.provider_auth_active or not request.url.path.startswith(
            PROTECTED_PREFIX
        ):
            return await call_next(request)

        auth_header = request.headers.get("Authorization")
        if not auth_header:
            return self._unauthorized(request, "Missing Authorization header")

        match = _BEARER_PATTERN.match(auth_header)
        if not match:
            return self._unauthorized(request, "Invalid Authorization header format")

        token = match.group(1).strip()
        if len(token) < MIN_TOKEN_LENGTH:
            return self._unauthorized(request, "Invalid token")

        if settings.API_SECRET_KEY is not None and not hmac.compare_digest(
            token, settings.API_SECRET_KEY.get_secret_value()
        ):
            return self._unauthorized(request, "Invalid token")

        return await call_next(request)

    def _get_settings(self, request: Request) -> Settings:
        settings = getattr(request.app.state, "settings", None)
        return settings if settings is not None else get_settings()

    def _unauthorized(self, request: Request, message: str) -> Response:
        logger.warning("provider_auth_rejected", path=request.url.path, reason=message)
        return build_error_response(
            request,
            401,
            ErrorCode.UNAUTHORIZED,
            message,
            headers={"WWW-Authenticate": "Bearer"},
        )
