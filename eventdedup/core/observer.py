"""Observability hooks for dedup decisions.

The engine and batch coordinator report through a DedupObserver instead of
logging directly. LoggingObserver is the default sink.
"""

import logging
from typing import Protocol

from eventdedup.models import BatchResult, Decision, Event, ItemOutcome, ItemResult

logger = logging.getLogger(__name__)


class DedupObserver(Protocol):
    """Receives dedup events."""

    def on_decision(self, event: Event, decision: Decision, window_seconds: int | None) -> None:
        ...

    def on_item_error(self, item: ItemResult) -> None:
        ...

    def on_batch_complete(self, result: BatchResult) -> None:
        ...


class NullObserver:
    """Observer that drops everything."""

    def on_decision(self, event: Event, decision: Decision, window_seconds: int | None) -> None:
        pass

    def on_item_error(self, item: ItemResult) -> None:
        pass

    def on_batch_complete(self, result: BatchResult) -> None:
        pass


class LoggingObserver:
    """Observer that writes to the standard logging module."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def on_decision(self, event: Event, decision: Decision, window_seconds: int | None) -> None:
        if window_seconds is None:
            self._log.debug(
                f"No dedup policy for event_type={event.event_type!r} event_id={event.event_id!r}"
            )
        elif not event.event_id:
            self._log.warning(
                f"Missing eventId for event_type={event.event_type} (window {window_seconds}s); dedup skipped"
            )
        elif decision == Decision.PROCEED:
            self._log.info(
                f"Recorded event_id={event.event_id} event_type={event.event_type} ttl={window_seconds}s"
            )
        else:
            self._log.info(f"Duplicate event_id={event.event_id} event_type={event.event_type} suppressed")

    def on_item_error(self, item: ItemResult) -> None:
        # Cache errors leave the dedup status unknown; keep them loud
        level = logging.ERROR if item.outcome == ItemOutcome.CACHE_ERROR else logging.WARNING
        self._log.log(
            level,
            f"Batch item {item.index} failed with {item.outcome.value}: {item.error}"
            f" (event_id={item.event_id}, should_process={item.should_process})",
        )

    def on_batch_complete(self, result: BatchResult) -> None:
        self._log.info(
            f"Batch done: status={result.status.value} total={result.total}"
            f" proceeded={result.count(ItemOutcome.PROCEED)}"
            f" suppressed={result.count(ItemOutcome.SUPPRESS)} failed={result.failed}"
        )


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging once at startup."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
