"""Unit tests for the Redis cache wrapper."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from hrbridge.core.redis import RedisCache


def _client(get_value=None, ttl=-2) -> MagicMock:
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[get_value, ttl])
    client = MagicMock()
    client.pipeline.return_value = pipe
    client.set = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=1)
    return client


class TestRedisCache:
    """Tests for RedisCache."""

    @pytest.mark.asyncio
    async def test_get_hit(self):
        client = _client(get_value=json.dumps("abc"), ttl=42)
        cache = RedisCache(client=client, prefix="hrbridge:oauth")

        result = await cache.get("workforce_access_token")

        assert result.hit
        assert result.value == "abc"
        assert result.ttl_remaining == 42
        client.pipeline.return_value.get.assert_called_once_with(
            "hrbridge:oauth:workforce_access_token"
        )

    @pytest.mark.asyncio
    async def test_get_miss(self):
        cache = RedisCache(client=_client())

        result = await cache.get("missing")

        assert not result.hit
        assert result.value is None

    @pytest.mark.asyncio
    async def test_set_uses_ttl(self):
        client = _client()
        cache = RedisCache(client=client, default_ttl=3600)

        assert await cache.set("k", "abc", ttl=60)
        await cache.set("j", "xyz")

        client.set.assert_any_await("hrbridge:k", json.dumps("abc"), ex=60)
        client.set.assert_any_await("hrbridge:j", json.dumps("xyz"), ex=3600)

    @pytest.mark.asyncio
    async def test_delete(self):
        client = _client()

        assert await RedisCache(client=client).delete("k")
        client.delete.assert_awaited_once_with("hrbridge:k")
