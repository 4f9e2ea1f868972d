"""API middleware components."""

from .auth import ProviderTokenMiddleware
from .context import RequestContextMiddleware
from .errors import ErrorHandlingMiddleware
from .logging import RequestLoggingMiddleware

__all__ = [
    "ErrorHandlingMiddleware",
    "ProviderTokenMiddleware",
    "RequestContextMiddleware",
    "RequestLoggingMiddleware",
]
