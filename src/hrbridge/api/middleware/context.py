"""Request context middleware: request id assignment and log binding."""

from collections.abc import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from hrbridge.core.logging import bind_contextvars, clear_contextvars

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware that assigns a request id and binds it for logging.

    An inbound ``X-Request-ID`` header is reused so callers can correlate
    their own logs; otherwise a new id is generated.

    Sets:
        request.state.request_id: The request ID
        X-Request-ID response header: For client correlation
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request with the request id bound to structlog contextvars."""
        request_id = self._get_request_id(request)
        request.state.request_id = request_id

        clear_contextvars()
        bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            clear_contextvars()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    def _get_request_id(self, request: Request) -> str:
        inbound = request.headers.get(REQUEST_ID_HEADER, "").strip()
        if inbound and len(inbound) <= MAX_REQUEST_ID_LENGTH:
            return inbound
        return uuid4().hex
