"""Redis client and cache utilities for hrbridge.

Provides Redis connection management and a small key/value cache used as
the shared backend for the workforce API access token.
"""

import asyncio
import json
from dataclasses import dataclass
from typing import Any

from redis.asyncio import ConnectionPool, Redis

from hrbridge.config.settings import get_settings

# Global connection pool
_pool: ConnectionPool | None = None
_client: Redis | None = None
_lock = asyncio.Lock()


async def get_redis_pool() -> ConnectionPool:
    """Get or create the Redis connection pool.

    Returns:
        Shared connection pool for Redis connections
    """
    global _pool
    if _pool is None:
        async with _lock:
            if _pool is None:
                settings = get_settings()
                _pool = ConnectionPool.from_url(
                    settings.REDIS_URL,
                    max_connections=settings.REDIS_MAX_CONNECTIONS,
                    decode_responses=True,
                )
    return _pool


async def get_redis_client() -> Redis:
    """Get or create the Redis client.

    Returns:
        Shared Redis client with connection pool
    """
    global _client
    if _client is None:
        pool = await get_redis_pool()
        async with _lock:
            if _client is None:
                _client = Redis(connection_pool=pool)
    return _client


async def close_redis() -> None:
    """Close Redis connection pool and client.

    Should be called during application shutdown.
    """
    global _pool, _client
    async with _lock:
        if _client is not None:
            await _client.aclose()
            _client = None
        if _pool is not None:
            await _pool.disconnect()
            _pool = None


@dataclass
class CacheResult:
    """Result from cache operations."""

    hit: bool
    value: Any
    ttl_remaining: int | None = None


class RedisCache:
    """JSON value cache on top of Redis with namespaced keys."""

    def __init__(
        self,
        client: Redis | None = None,
        prefix: str = "hrbridge",
        default_ttl: int = 3600,
    ):
        """Initialize Redis cache.

        Args:
            client: Redis client (uses global if None)
            prefix: Key prefix for namespacing
            default_ttl: Default TTL in seconds
        """
        self._client = client
        self.prefix = prefix
        self.default_ttl = default_ttl

    async def _get_client(self) -> Redis:
        if self._client is not None:
            return self._client
        return await get_redis_client()

    def _make_key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    async def get(self, key: str) -> CacheResult:
        """Get value from cache.

        Returns:
            CacheResult with hit status and value
        """
        client = await self._get_client()
        full_key = self._make_key(key)

        pipe = client.pipeline()
        pipe.get(full_key)
        pipe.ttl(full_key)
        results = await pipe.execute()

        value_json = results[0]
        ttl = results[1] if results[1] > 0 else None

        if value_json is None:
            return CacheResult(hit=False, value=None)

        return CacheResult(hit=True, value=json.loads(value_json), ttl_remaining=ttl)

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> bool:
        """Set a JSON-serializable value with a TTL (default TTL if None)."""
        client = await self._get_client()
        effective_ttl = ttl if ttl is not None else self.default_ttl
        result = await client.set(
            self._make_key(key), json.dumps(value, default=str), ex=effective_ttl
        )
        return result is True

    async def delete(self, key: str) -> bool:
        """Delete a key. Returns True if it existed."""
        client = await self._get_client()
        result = await client.delete(self._make_key(key))
        return result > 0
