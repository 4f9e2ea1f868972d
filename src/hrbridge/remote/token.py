"""OAuth2 client-credentials token acquisition and caching.

The bearer token for the workforce API is shared by every request in the
process (or, with the Redis backend, by every process). The cache is an
injected ``TokenCache`` so tests control expiry through a fake clock.

Usage:
    manager = OAuth2TokenManager(
        http_client,
        token_url="https://idp.example.com/oauth/token",
        client_id="hrbridge",
        client_secret="...",
        scope="employees:read employees:write",
    )
    token = await manager.get_access_token()  # raises AuthenticationError
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import httpx

from hrbridge.core.exceptions import AuthenticationError
from hrbridge.core.logging import get_logger
from hrbridge.core.redis import RedisCache
from hrbridge.observability.metrics import record_token_request
from hrbridge.remote.circuit import AuthCircuitBreaker

logger = get_logger(__name__)

DEFAULT_CACHE_KEY = "workforce_access_token"
DEFAULT_TOKEN_TTL_SECONDS = 3600


class TokenCache(Protocol):
    """Storage for the cached bearer token."""

    async def get(self, key: str) -> str | None:
        """Return the live token under ``key`` or None."""
        ...

    async def set(self, key: str, token: str, ttl_seconds: int) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...


@dataclass
class CachedToken:
    """A cached token and its expiry on the cache clock."""

    token: str
    expires_at: float


class InMemoryTokenCache:
    """Process-wide token cache with passive expiry.

    Example:
        now = [0.0]
        cache = InMemoryTokenCache(clock=lambda: now[0])
        await cache.set("k", "abc", ttl_seconds=10)
        now[0] = 11.0
        await cache.get("k")  # None
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, CachedToken] = {}

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.token

    async def set(self, key: str, token: str, ttl_seconds: int) -> None:
        self._entries[key] = CachedToken(token=token, expires_at=self._clock() + ttl_seconds)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)


class RedisTokenCache:
    """Token cache shared across processes through Redis."""

    def __init__(self, cache: RedisCache | None = None):
        self._cache = cache or RedisCache(prefix="hrbridge:oauth")

    async def get(self, key: str) -> str | None:
        result = await self._cache.get(key)
        return result.value if result.hit else None

    async def set(self, key: str, token: str, ttl_seconds: int) -> None:
        await self._cache.set(key, token, ttl=ttl_seconds)

    async def delete(self, key: str) -> None:
        await self._cache.delete(key)


class OAuth2TokenManager:
    """Acquires and caches a client-credentials bearer token.

    A cache miss costs exactly one round trip to the token endpoint.
    Concurrent callers that miss together share that round trip: the
    fetch runs under a lock and the cache is re-read once the lock is held.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        token_url: str,
        client_id: str,
        client_secret: str,
        scope: str,
        cache: TokenCache | None = None,
        cache_key: str = DEFAULT_CACHE_KEY,
        ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS,
        circuit_breaker: AuthCircuitBreaker | None = None,
    ):
        """Initialize the token manager.

        Args:
            http_client: Client used for the token request (carries the timeout)
            token_url: OAuth2 token endpoint
            client_id: Client-credentials id
            client_secret: Client-credentials secret
            scope: Requested scope
            cache: Token cache (process-local in-memory cache if None)
            cache_key: Fixed key the token is stored under
            ttl_seconds: Cache TTL for a fetched token
            circuit_breaker: Optional breaker failing fast on repeated failures
        """
        self._http = http_client
        self.token_url = token_url
        self.client_id = client_id
        self._client_secret = client_secret
        self.scope = scope
        self.cache = cache if cache is not None else InMemoryTokenCache()
        self.cache_key = cache_key
        self.ttl_seconds = ttl_seconds
        self.circuit_breaker = circuit_breaker
        self._lock = asyncio.Lock()

    async def get_access_token(self) -> str:
        """Return a live bearer token, fetching one on a cache miss.

        Raises:
            AuthenticationError: If the token endpoint fails, returns no
                access token, or the authentication circuit is open
        """
        token = await self.cache.get(self.cache_key)
        if token is not None:
            record_token_request("cache_hit")
            return token

        async with self._lock:
            token = await self.cache.get(self.cache_key)
            if token is not None:
                record_token_request("cache_hit")
                return token

            if self.circuit_breaker is not None and not self.circuit_breaker.can_execute():
                record_token_request("circuit_open")
                retry_in = self.circuit_breaker.seconds_until_retry()
                raise AuthenticationError(
                    f"Authentication circuit open, retry in {retry_in:.0f}s"
                )

            try:
                token, ttl = await self._request_token()
            except AuthenticationError as e:
                record_token_request("failure")
                if self.circuit_breaker is not None:
                    self.circuit_breaker.record_failure()
                logger.error(
                    "oauth2_authentication_failed",
                    token_url=self.token_url,
                    client_id=self.client_id,
                    reason=e.reason,
                )
                raise

            if self.circuit_breaker is not None:
                self.circuit_breaker.record_success()
            await self.cache.set(self.cache_key, token, ttl)
            record_token_request("success")
            logger.info("oauth2_token_acquired", ttl_seconds=ttl)
            return token

    async def clear_token(self) -> None:
        """Evict the cached token so the next call re-authenticates."""
        await self.cache.delete(self.cache_key)
        logger.info("oauth2_token_cleared")

    async def _request_token(self) -> tuple[str, int]:
        logger.debug("oauth2_token_requested", token_url=self.token_url)
        try:
            response = await self._http.post(
                self.token_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self._client_secret,
                    "scope": self.scope,
                },
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise AuthenticationError(f"Token request failed: {e!s}") from e

        if not response.is_success:
            raise AuthenticationError(
                f"Token endpoint returned HTTP {response.status_code}"
            )

        try:
            body = response.json()
        except ValueError as e:
            raise AuthenticationError("Token endpoint returned invalid JSON") from e

        token = body.get("access_token") if isinstance(body, dict) else None
        if not token:
            raise AuthenticationError("Token response did not include an access_token")

        return token, self._effective_ttl(body.get("expires_in"))

    def _effective_ttl(self, expires_in: object) -> int:
        # Never cache past the token's own stated lifetime.
        if isinstance(expires_in, int) and not isinstance(expires_in, bool) and expires_in > 0:
            return min(self.ttl_seconds, expires_in)
        return self.ttl_seconds
