"""Dedup cache port.

The engine only needs these three operations. RedisStorage implements them
against a shared Redis; tests use an in-memory double.
"""

from typing import Protocol


class DedupCache(Protocol):
    """Key-value store with per-key expiry.

    Implementations raise CacheError on any communication failure.
    """

    async def exists(self, key: str) -> bool:
        """Check if key exists."""
        ...

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        """Set string value with optional expiration (seconds)."""
        ...

    async def setnx(self, key: str, value: str, ex: int | None = None) -> bool:
        """Set if not exists with optional expiration.

        Returns:
            True if the key was created, False if it already existed
        """
        ...
