"""Redis connection pool and dedup cache adapter.

Connects lazily on first use and drops the pool after a connection failure
so the next call reconnects. Connection/timeout errors are retried here;
every remaining Redis error surfaces as CacheError.
"""

import logging
from typing import Awaitable, Callable, TypeVar

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from eventdedup.config import Settings, get_settings
from eventdedup.core.errors import CacheError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RedisStorage:
    """Redis storage with connection pool."""

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize storage. No connection is made until first use."""
        self._settings = settings
        self._pool: ConnectionPool | None = None
        self._client: Redis | None = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        """Create connection pool and connect to Redis."""
        settings = self.settings
        self._pool = ConnectionPool.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=50,
            socket_timeout=settings.redis_socket_timeout,
            socket_connect_timeout=settings.redis_connect_timeout,
        )
        self._client = Redis(connection_pool=self._pool)
        logger.info(f"Redis pool created for {settings.redis_host}:{settings.redis_port}")

    async def disconnect(self) -> None:
        """Close connection pool."""
        if self._client:
            await self._client.aclose()
        if self._pool:
            await self._pool.disconnect()
        self._client = None
        self._pool = None

    async def _get_client(self) -> Redis:
        """Get Redis client, connecting on first use."""
        if self._client is None:
            await self.connect()
        return self._client

    @retry(
        retry=retry_if_exception_type((RedisConnectionError, RedisTimeoutError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    async def _execute(self, op: Callable[[Redis], Awaitable[T]]) -> T:
        """Run a single Redis command with retry on connectivity errors."""
        client = await self._get_client()
        try:
            return await op(client)
        except (RedisConnectionError, RedisTimeoutError):
            # Drop the pool so the retry (or next call) reconnects
            await self.disconnect()
            raise

    async def _call(self, name: str, key: str, op: Callable[[Redis], Awaitable[T]]) -> T:
        try:
            return await self._execute(op)
        except RedisError as e:
            logger.warning(f"Redis {name} failed for key={key}: {e}")
            raise CacheError(f"Redis {name} failed: {e}", key=key) from e

    async def exists(self, key: str) -> bool:
        """Check if key exists."""
        count = await self._call("EXISTS", key, lambda c: c.exists(key))
        return count > 0

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        """Set string value with optional expiration."""
        result = await self._call("SET", key, lambda c: c.set(key, value, ex=ex))
        return bool(result)

    async def setnx(self, key: str, value: str, ex: int | None = None) -> bool:
        """Set if not exists with optional expiration."""
        result = await self._call("SET NX", key, lambda c: c.set(key, value, nx=True, ex=ex))
        return bool(result)

    async def health_check(self) -> bool:
        """Check Redis connection health."""
        try:
            client = await self._get_client()
            await client.ping()
            return True
        except RedisError:
            return False

