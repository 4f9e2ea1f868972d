"""Workforce management API client.

Wraps the authenticated create/update/get calls on the remote employee
resource. Every public operation returns an ``ApiResult``; transport
errors, authentication failures and non-2xx responses all become
``Failure`` and nothing is raised to the caller.
"""

from typing import Any

import httpx

from hrbridge.config.settings import Settings, TokenCacheBackend
from hrbridge.core.exceptions import AuthenticationError
from hrbridge.core.logging import get_logger
from hrbridge.employees.types import EmployeeSyncRecord
from hrbridge.observability.metrics import observe_remote_request
from hrbridge.remote.circuit import AuthCircuitBreaker, CircuitBreakerConfig
from hrbridge.remote.token import (
    InMemoryTokenCache,
    OAuth2TokenManager,
    RedisTokenCache,
    TokenCache,
)
from hrbridge.remote.types import ApiResult, Failure, Success

logger = get_logger(__name__)

DEFAULT_ERROR_MESSAGES = {
    "create": "Failed to create employee",
    "update": "Failed to update employee",
    "get": "Employee not found",
}


def extract_error_message(body: Any, default: str) -> str:
    """Pick the remote error message out of an error response body.

    Looks at ``error.message`` when ``error`` is an object, ``error`` when
    it is a string, then ``message``; falls back to ``default``.
    """
    if not isinstance(body, dict):
        return default

    error = body.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str) and error["message"]:
        return error["message"]
    if isinstance(error, str) and error:
        return error

    message = body.get("message")
    if isinstance(message, str) and message:
        return message

    return default


class WorkforceApiClient:
    """Client for the remote ``/employees`` resource.

    Example:
        client = WorkforceApiClient(http_client, token_manager, base_url=url)
        result = await client.create_employee(record)
        if result.success:
            remote_id = result.data.get("id")
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        token_manager: OAuth2TokenManager,
        *,
        base_url: str,
    ):
        self._http = http_client
        self.token_manager = token_manager
        self.base_url = base_url.rstrip("/")

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient,
        cache: TokenCache | None = None,
    ) -> "WorkforceApiClient":
        """Build the client and its token manager from settings.

        Args:
            settings: Application settings
            http_client: Shared client; its timeout bounds every call
            cache: Token cache override (chosen by TOKEN_CACHE_BACKEND if None)
        """
        if cache is None:
            if settings.TOKEN_CACHE_BACKEND == TokenCacheBackend.REDIS:
                cache = RedisTokenCache()
            else:
                cache = InMemoryTokenCache()

        breaker = None
        if settings.AUTH_CIRCUIT_ENABLED:
            breaker = AuthCircuitBreaker(
                CircuitBreakerConfig(
                    failure_threshold=settings.AUTH_CIRCUIT_FAILURE_THRESHOLD,
                    reset_seconds=settings.AUTH_CIRCUIT_RESET_SECONDS,
                )
            )

        secret = settings.REMOTE_CLIENT_SECRET
        token_manager = OAuth2TokenManager(
            http_client,
            token_url=settings.REMOTE_TOKEN_URL,
            client_id=settings.REMOTE_CLIENT_ID,
            client_secret=secret.get_secret_value() if secret is not None else "",
            scope=settings.REMOTE_SCOPE,
            cache=cache,
            cache_key=settings.TOKEN_CACHE_KEY,
            ttl_seconds=settings.TOKEN_CACHE_TTL_SECONDS,
            circuit_breaker=breaker,
        )
        return cls(http_client, token_manager, base_url=settings.REMOTE_API_BASE_URL)

    async def create_employee(self, record: EmployeeSyncRecord) -> ApiResult:
        """POST the canonical record to ``/employees``."""
        return await self._request(
            "create", "POST", "/employees", json=record.to_remote_payload()
        )

    async def update_employee(self, remote_id: str, record: EmployeeSyncRecord) -> ApiResult:
        """PUT the canonical record to ``/employees/{remote_id}``."""
        return await self._request(
            "update", "PUT", f"/employees/{remote_id}", json=record.to_remote_payload()
        )

    async def get_employee(self, remote_id: str) -> ApiResult:
        """GET ``/employees/{remote_id}``."""
        return await self._request("get", "GET", f"/employees/{remote_id}")

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> ApiResult:
        try:
            return await self._send(operation, method, path, json)
        except Exception as e:
            # Token cache backend errors, response handling bugs
            logger.exception("remote_request_error", operation=operation, path=path)
            return Failure(str(e) or DEFAULT_ERROR_MESSAGES[operation])

    async def _send(
        self,
        operation: str,
        method: str,
        path: str,
        json: dict[str, Any] | None,
    ) -> ApiResult:
        default_message = DEFAULT_ERROR_MESSAGES[operation]

        with observe_remote_request(operation) as context:
            try:
                token = await self.token_manager.get_access_token()
            except AuthenticationError as e:
                context["outcome"] = "auth_failure"
                return Failure(f"OAuth2 authentication failed: {e}")

            try:
                response = await self._http.request(
                    method,
                    f"{self.base_url}{path}",
                    json=json,
                    headers={
                        "Authorization": f"Bearer {token}",
                        "Accept": "application/json",
                    },
                )
            except httpx.HTTPError as e:
                context["outcome"] = "transport_error"
                logger.warning(
                    "remote_request_failed",
                    operation=operation,
                    path=path,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                return Failure(str(e) or type(e).__name__)

            body = self._decode(response)

            if response.is_success:
                data = body.get("data") if isinstance(body, dict) else None
                return Success(data if isinstance(data, dict) else {})

            context["outcome"] = "http_error"
            if response.status_code == 401:
                await self.token_manager.clear_token()

            message = extract_error_message(body, default_message)
            logger.warning(
                "remote_request_rejected",
                operation=operation,
                path=path,
                status_code=response.status_code,
                message=message,
            )
            return Failure(message)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None
