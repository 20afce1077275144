"""Batch coordinator.

Runs decode -> parse -> decide for every envelope of a batch and turns each
failure into a tagged ItemResult, so one bad item never aborts the batch.
"""

import asyncio
from typing import Any, Literal

from eventdedup.channels.base import EnvelopeDecoder
from eventdedup.channels.sqs import SqsEnvelopeDecoder
from eventdedup.core.engine import DedupEngine
from eventdedup.core.errors import CacheError, DecodeError, InvalidInputShape, ParseError
from eventdedup.core.observer import DedupObserver, NullObserver
from eventdedup.models import BatchResult, Decision, ItemOutcome, ItemResult


class BatchCoordinator:
    """Processes batches of envelopes through the dedup engine."""

    def __init__(
        self,
        engine: DedupEngine,
        decoder: EnvelopeDecoder | None = None,
        cache_error_fallback: Literal["proceed", "suppress"] = "proceed",
        concurrency: int = 1,
        observer: DedupObserver | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.engine = engine
        self.decoder = decoder or SqsEnvelopeDecoder()
        self.cache_error_fallback = cache_error_fallback
        self.concurrency = concurrency
        self.observer = observer or NullObserver()

    async def process_batch(self, raw_items: Any) -> BatchResult:
        """Process a batch of envelopes in input order.

        Args:
            raw_items: List of envelopes

        Returns:
            BatchResult with one ItemResult per envelope, same order as input

        Raises:
            InvalidInputShape: If raw_items is not a list (nothing is processed)
        """
        if not isinstance(raw_items, list):
            raise InvalidInputShape(f"Expected a batch (list of envelopes), got {type(raw_items).__name__}")

        if self.concurrency == 1 or len(raw_items) <= 1:
            items = [await self.process_item(index, raw) for index, raw in enumerate(raw_items)]
        else:
            semaphore = asyncio.Semaphore(self.concurrency)

            async def bounded(index: int, raw: Any) -> ItemResult:
                async with semaphore:
                    return await self.process_item(index, raw)

            tasks = [asyncio.ensure_future(bounded(i, raw)) for i, raw in enumerate(raw_items)]
            try:
                items = list(await asyncio.gather(*tasks))
            except BaseException:
                # Unexpected error or cancellation: stop the remaining items too
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise

        result = BatchResult(items=items)
        self.observer.on_batch_complete(result)
        return result

    async def process_item(self, index: int, raw: Any) -> ItemResult:
        """Decode, parse and decide one envelope. Never raises for item-level errors."""
        try:
            message = self.decoder.decode(raw)
        except DecodeError as e:
            return self._failed(index, ItemOutcome.DECODE_ERROR, e)

        try:
            event = self.decoder.parse(message)
        except ParseError as e:
            return self._failed(index, ItemOutcome.PARSE_ERROR, e)

        try:
            decision = await self.engine.decide(event)
        except CacheError as e:
            return self._failed(
                index,
                ItemOutcome.CACHE_ERROR,
                e,
                event_id=event.event_id,
                event_type=event.event_type,
                should_process=self.cache_error_fallback == "proceed",
            )

        return ItemResult(
            index=index,
            outcome=ItemOutcome(decision.value),
            event_id=event.event_id,
            event_type=event.event_type,
            should_process=decision == Decision.PROCEED,
        )

    def _failed(
        self,
        index: int,
        outcome: ItemOutcome,
        error: Exception,
        event_id: str | None = None,
        event_type: str | None = None,
        should_process: bool = False,
    ) -> ItemResult:
        item = ItemResult(
            index=index,
            outcome=outcome,
            event_id=event_id,
            event_type=event_type,
            error=str(error),
            should_process=should_process,
        )
        self.observer.on_item_error(item)
        return item
