"""Error handling: map exceptions to the standard error envelope."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from hrbridge.api.schemas.errors import APIError, ErrorBody, ErrorCode
from hrbridge.core.exceptions import (
    AuthenticationError,
    EscapeCharacterError,
    InvalidProviderError,
)
from hrbridge.core.logging import get_logger

logger = get_logger(__name__)

INVALID_EMPLOYEE_DATA = "Invalid employee data"
INTERNAL_ERROR_MESSAGE = "An error occurred while processing the employee data"

# Status codes without a more specific mapping
STATUS_CODE_ERRORS: dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.UNAUTHORIZED,
    404: ErrorCode.NOT_FOUND,
    502: ErrorCode.REMOTE_API_ERROR,
}


def get_request_id(request: Request) -> str:
    """Request id assigned by RequestContextMiddleware, or ``unknown``."""
    return str(getattr(request.state, "request_id", "unknown"))


def build_error_response(
    request: Request,
    status_code: int,
    code: ErrorCode | str,
    message: str,
    details: Any | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render the standard error envelope."""
    request_id = get_request_id(request)
    error = APIError(
        error=ErrorBody(
            code=code.value if isinstance(code, ErrorCode) else code,
            message=message,
            details=details,
        ),
        request_id=request_id,
        timestamp=datetime.now(UTC),
    )
    return JSONResponse(
        status_code=status_code,
        content=error.model_dump(mode="json", exclude_none=True),
        headers={"X-Request-ID": request_id, **(headers or {})},
    )


def field_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Flatten pydantic error entries to ``[{field, message}]``."""
    result = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        result.append({"field": ".".join(loc) or "body", "message": error.get("msg", "")})
    return result


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap ``HTTPException`` in the error envelope.

    Route handlers raise ``HTTPException(detail={"code", "message", "details"})``;
    plain string details (framework 404/405) get a code from the status.
    """
    if isinstance(exc.detail, dict) and "code" in exc.detail:
        code = exc.detail["code"]
        message = exc.detail.get("message", "")
        details = exc.detail.get("details")
    else:
        code = STATUS_CODE_ERRORS.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
        message = str(exc.detail)
        details = None
    return build_error_response(
        request, exc.status_code, code, message, details, headers=getattr(exc, "headers", None)
    )


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed requests as 400 ``VALIDATION_ERROR``."""
    return build_error_response(
        request,
        400,
        ErrorCode.VALIDATION_ERROR,
        INVALID_EMPLOYEE_DATA,
        field_errors(list(exc.errors())),
    )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware that catches exceptions and returns standardized error responses.

    Maps domain exceptions to appropriate HTTP status codes and formats
    all errors using the APIError schema.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and handle any exceptions."""
        try:
            return await call_next(request)
        except Exception as exc:
            return self._handle_exception(request, exc)

    def _handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        status_code, error_code, message, details = self._map_exception(request, exc)
        if status_code >= 500:
            logger.exception(
                "unhandled_exception",
                path=request.url.path,
                error_type=type(exc).__name__,
            )
        return build_error_response(request, status_code, error_code, message, details)

    def _map_exception(
        self, request: Request, exc: Exception
    ) -> tuple[int, ErrorCode, str, Any | None]:
        """Map exception to (status_code, error_code, message, details)."""
        if isinstance(exc, InvalidProviderError):
            return 400, ErrorCode.INVALID_PROVIDER, str(exc), {"provider": exc.provider}

        if isinstance(exc, EscapeCharacterError):
            return 400, ErrorCode.INVALID_INPUT, str(exc), {"field": exc.field}

        # Provider payload validation (pydantic)
        if isinstance(exc, ValidationError):
            return (
                400,
                ErrorCode.VALIDATION_ERROR,
                INVALID_EMPLOYEE_DATA,
                field_errors(exc.errors()),
            )

        # Outbound token acquisition, never the caller's credentials
        if isinstance(exc, AuthenticationError):
            return (
                502,
                ErrorCode.REMOTE_API_ERROR,
                f"OAuth2 authentication failed: {exc}",
                None,
            )

        return (
            500,
            ErrorCode.INTERNAL_ERROR,
            INTERNAL_ERROR_MESSAGE,
            {"type": type(exc).__name__} if self._is_debug(request) else None,
        )

    def _is_debug(self, request: Request) -> bool:
        settings = getattr(request.app.state, "settings", None)
        return bool(settings is not None and settings.DEBUG)
