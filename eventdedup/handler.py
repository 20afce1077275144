"""Invocation entry point.

Wires settings, policy table, Redis cache, engine and batch coordinator
together, and exposes the batch invocation as an AWS-Lambda-style handler
returning a single summary string.
"""

import asyncio
import logging
from functools import lru_cache
from typing import Any

from eventdedup.config import Settings, get_settings
from eventdedup.core.batch import BatchCoordinator
from eventdedup.core.engine import DedupEngine
from eventdedup.core.errors import InvalidInputShape
from eventdedup.core.observer import DedupObserver, LoggingObserver, setup_logging
from eventdedup.core.policy import DedupPolicyTable, load_policy_table
from eventdedup.models import BatchResult
from eventdedup.storage.base import DedupCache
from eventdedup.storage.redis import RedisStorage

logger = logging.getLogger(__name__)

ERROR_PREFIX = "Error while processing event: "


class DedupService:
    """Process-wide dedup components, built once at startup."""

    def __init__(
        self,
        settings: Settings,
        policy: DedupPolicyTable,
        cache: DedupCache,
        observer: DedupObserver | None = None,
    ) -> None:
        self.settings = settings
        self.policy = policy
        self.cache = cache
        observer = observer or LoggingObserver()
        self.engine = DedupEngine(policy, cache, atomic=settings.dedup_atomic, observer=observer)
        self.coordinator = BatchCoordinator(
            self.engine,
            cache_error_fallback=settings.dedup_cache_error_fallback,
            concurrency=settings.dedup_batch_concurrency,
            observer=observer,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "DedupService":
        policy = load_policy_table(settings.dedup_properties_path)
        return cls(settings, policy, RedisStorage(settings))

    async def process(self, payload: Any) -> BatchResult:
        """Run one batch invocation. Raises InvalidInputShape for non-batch input."""
        return await self.coordinator.process_batch(normalize_payload(payload))

    async def close(self) -> None:
        if isinstance(self.cache, RedisStorage):
            await self.cache.disconnect()


@lru_cache()
def get_dedup_service() -> DedupService:
    """Get dedup service instance (lazy init, policy loaded once)."""
    settings = get_settings()
    setup_logging(settings.log_level)
    return DedupService.from_settings(settings)


def normalize_payload(payload: Any) -> Any:
    """Unwrap an SQS event ({"Records": [...]}) into its list of records.

    Anything else is passed through unchanged; shape checks happen in the coordinator.
    """
    if isinstance(payload, dict) and isinstance(payload.get("Records"), list):
        return payload["Records"]
    return payload


async def handle_invocation(payload: Any, service: DedupService | None = None) -> str:
    """Process a batch and return a summary string. Never raises for bad input."""
    try:
        service = service or get_dedup_service()
        result = await service.process(payload)
    except InvalidInputShape as e:
        logger.error(f"Rejected invocation: {e}")
        return f"{ERROR_PREFIX}{e}"
    except Exception as e:
        logger.exception("Invocation failed during setup")
        return f"{ERROR_PREFIX}{e}"
    return result.summary


_loop: asyncio.AbstractEventLoop | None = None


def lambda_handler(event: Any, context: Any = None) -> str:
    """AWS Lambda entry point.

    A single event loop is reused across warm invocations so the Redis pool,
    which is bound to its loop, survives between calls.
    """
    global _loop
    if _loop is None or _loop.is_closed():
        _loop = asyncio.new_event_loop()
    return _loop.run_until_complete(handle_invocation(event))
