"""
Tests for the Redis cache adapter (Redis client mocked).

Run with: pytest tests/test_redis_storage.py -v
"""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError

from eventdedup.config import Settings
from eventdedup.core.errors import CacheError
from eventdedup.storage.redis import RedisStorage


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, redis_password="secret", redis_db=2)


@pytest.fixture
def client() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def storage(settings, client) -> RedisStorage:
    storage = RedisStorage(settings)

    async def fake_connect() -> None:
        storage._client = client

    storage.connect = fake_connect
    return storage


class TestSettings:
    def test_redis_url_with_password(self, settings):
        assert settings.redis_url == "redis://:secret@localhost:6379/2"

    def test_redis_endpoint_alias(self, monkeypatch):
        monkeypatch.setenv("REDIS_ENDPOINT", "cache.internal")
        monkeypatch.setenv("REDIS_PORT", "6380")

        settings = Settings(_env_file=None)

        assert settings.redis_host == "cache.internal"
        assert settings.redis_url == "redis://cache.internal:6380/0"


class TestCommands:
    """Port operations map onto Redis commands."""

    @pytest.mark.asyncio
    async def test_connects_lazily(self, storage, client):
        assert not storage.is_connected
        client.exists.return_value = 0

        assert await storage.exists("E1") is False
        assert storage.is_connected

    @pytest.mark.asyncio
    async def test_exists(self, storage, client):
        client.exists.return_value = 1

        assert await storage.exists("E1") is True
        client.exists.assert_awaited_once_with("E1")

    @pytest.mark.asyncio
    async def test_set_with_expiry(self, storage, client):
        client.set.return_value = True

        assert await storage.set("E1", "body", ex=300) is True
        client.set.assert_awaited_once_with("E1", "body", ex=300)

    @pytest.mark.asyncio
    async def test_setnx_uses_nx_and_ex(self, storage, client):
        client.set.return_value = None

        assert await storage.setnx("E1", "body", ex=300) is False
        client.set.assert_awaited_once_with("E1", "body", nx=True, ex=300)


class TestFailures:
    """Redis errors become CacheError; connectivity errors are retried."""

    @pytest.mark.asyncio
    async def test_reconnects_after_connection_error(self, storage, client):
        client.exists.side_effect = [RedisConnectionError("reset by peer"), 1]

        assert await storage.exists("E1") is True
        assert client.exists.await_count == 2
        client.aclose.assert_awaited()

    @pytest.mark.asyncio
    async def test_persistent_connection_error_raises_cache_error(self, storage, client):
        client.exists.side_effect = RedisConnectionError("Connection refused")

        with pytest.raises(CacheError) as exc_info:
            await storage.exists("E1")

        assert exc_info.value.key == "E1"
        assert client.exists.await_count == 3

    @pytest.mark.asyncio
    async def test_command_error_not_retried(self, storage, client):
        client.set.side_effect = ResponseError("OOM command not allowed")

        with pytest.raises(CacheError):
            await storage.set("E1", "body", ex=300)

        assert client.set.await_count == 1

    @pytest.mark.asyncio
    async def test_health_check(self, storage, client):
        assert await storage.health_check() is True

        client.ping.side_effect = RedisConnectionError("down")
        assert await storage.health_check() is False
