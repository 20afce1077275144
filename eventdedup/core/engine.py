"""Dedup decision engine.

For one event: look up the window for its eventType, then check the cache
for its eventId. Hit -> SUPPRESS (read only, TTL untouched). Miss -> record
the event with TTL = window and PROCEED.

The default EXISTS-then-SET sequence is not atomic: two deliveries of the
same eventId racing each other can both PROCEED. With atomic=True a single
SET NX EX is used instead ("created" -> PROCEED, "existed" -> SUPPRESS).
"""

from eventdedup.core.errors import CacheError
from eventdedup.core.observer import DedupObserver, NullObserver
from eventdedup.core.policy import DedupPolicyTable
from eventdedup.models import Decision, Event
from eventdedup.storage.base import DedupCache


class DedupEngine:
    """Stateless between calls except through the shared cache."""

    def __init__(
        self,
        policy: DedupPolicyTable,
        cache: DedupCache,
        atomic: bool = False,
        observer: DedupObserver | None = None,
    ) -> None:
        self.policy = policy
        self.cache = cache
        self.atomic = atomic
        self.observer = observer or NullObserver()

    async def decide(self, event: Event) -> Decision:
        """Decide whether event is first-seen (PROCEED) or a duplicate (SUPPRESS).

        Args:
            event: Parsed event

        Returns:
            Decision.PROCEED or Decision.SUPPRESS

        Raises:
            CacheError: If the cache could not be read or written. The dedup
                status is unknown; the caller picks the fallback.
        """
        window = self.policy.window_for(event.event_type)
        if window is None or not event.is_dedupable:
            self.observer.on_decision(event, Decision.PROCEED, window)
            return Decision.PROCEED

        if self.atomic:
            decision = await self._decide_atomic(event, window)
        else:
            decision = await self._decide_check_then_set(event, window)

        self.observer.on_decision(event, decision, window)
        return decision

    async def _decide_check_then_set(self, event: Event, window: int) -> Decision:
        key = event.event_id
        if await self.cache.exists(key):
            return Decision.SUPPRESS
        stored = await self.cache.set(key, event.cache_value(), ex=window)
        if not stored:
            raise CacheError("Cache refused SET", key=key)
        return Decision.PROCEED

    async def _decide_atomic(self, event: Event, window: int) -> Decision:
        created = await self.cache.setnx(event.event_id, event.cache_value(), ex=window)
        return Decision.PROCEED if created else Decision.SUPPRESS
