"""Workforce management API: OAuth2 token handling and the employee client."""

from hrbridge.remote.circuit import AuthCircuitBreaker, CircuitBreakerConfig, CircuitState
from hrbridge.remote.client import WorkforceApiClient
from hrbridge.remote.token import (
    InMemoryTokenCache,
    OAuth2TokenManager,
    RedisTokenCache,
    TokenCache,
)
from hrbridge.remote.types import ApiResult, Failure, Success

__all__ = [
    "ApiResult",
    "AuthCircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitState",
    "Failure",
    "InMemoryTokenCache",
    "OAuth2TokenManager",
    "RedisTokenCache",
    "Success",
    "TokenCache",
    "WorkforceApiClient",
]
