"""Shared fixtures: in-memory cache double and engine/coordinator builders."""

import json
from urllib.parse import quote_plus

import pytest

from eventdedup.core.batch import BatchCoordinator
from eventdedup.core.engine import DedupEngine
from eventdedup.core.errors import CacheError
from eventdedup.core.policy import DedupPolicyTable


class InMemoryCache:
    """DedupCache double with a manual clock and a call log."""

    def __init__(self) -> None:
        self.now = 0.0
        self.values: dict[str, str] = {}
        self.expires_at: dict[str, float] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_on: set[str] = set()

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def _purge(self, key: str) -> None:
        if key in self.expires_at and self.expires_at[key] <= self.now:
            del self.values[key]
            del self.expires_at[key]

    def _record(self, op: str, key: str) -> None:
        self.calls.append((op, key))
        if op in self.fail_on:
            raise CacheError(f"Redis {op} failed: Connection refused", key=key)

    def ttl(self, key: str) -> float | None:
        self._purge(key)
        if key not in self.expires_at:
            return None
        return self.expires_at[key] - self.now

    def writes(self) -> list[tuple[str, str]]:
        return [call for call in self.calls if call[0] in ("set", "setnx")]

    async def exists(self, key: str) -> bool:
        self._record("exists", key)
        self._purge(key)
        return key in self.values

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self._record("set", key)
        self.values[key] = value
        if ex is not None:
            self.expires_at[key] = self.now + ex
        else:
            self.expires_at.pop(key, None)
        return True

    async def setnx(self, key: str, value: str, ex: int | None = None) -> bool:
        self._record("setnx", key)
        self._purge(key)
        if key in self.values:
            return False
        self.values[key] = value
        if ex is not None:
            self.expires_at[key] = self.now + ex
        return True


def make_envelope(event: dict, message_id: str = "m-1") -> dict:
    """SQS-style record with a URL-encoded JSON body."""
    return {"messageId": message_id, "body": quote_plus(json.dumps(event))}


def order_created(event_id: str = "E1", **extra) -> dict:
    event = {
        "id": "1",
        "eventType": "ORDER_CREATED",
        "eventId": event_id,
        "createdAt": 1700000000,
        "body": "order 42 created",
    }
    event.update(extra)
    return event


@pytest.fixture
def cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def policy() -> DedupPolicyTable:
    return DedupPolicyTable({"ORDER_CREATED": 300})


@pytest.fixture
def engine(policy: DedupPolicyTable, cache: InMemoryCache) -> DedupEngine:
    return DedupEngine(policy, cache)


@pytest.fixture
def coordinator(engine: DedupEngine) -> BatchCoordinator:
    return BatchCoordinator(engine)
