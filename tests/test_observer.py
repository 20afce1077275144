"""
Tests for the logging observer.

Run with: pytest tests/test_observer.py -v
"""

import logging

from eventdedup.core.observer import LoggingObserver
from eventdedup.models import BatchResult, Decision, Event, ItemOutcome, ItemResult


class TestLoggingObserver:
    def test_cache_error_logged_as_error(self, caplog):
        item = ItemResult(index=3, outcome=ItemOutcome.CACHE_ERROR, event_id="E1", error="down", should_process=True)

        with caplog.at_level(logging.INFO):
            LoggingObserver().on_item_error(item)

        assert caplog.records[0].levelno == logging.ERROR
        assert "Batch item 3 failed with CACHE_ERROR" in caplog.text

    def test_decode_error_logged_as_warning(self, caplog):
        item = ItemResult(index=0, outcome=ItemOutcome.DECODE_ERROR, error="Envelope has no body")

        with caplog.at_level(logging.INFO):
            LoggingObserver().on_item_error(item)

        assert caplog.records[0].levelno == logging.WARNING

    def test_decision_and_batch_summary(self, caplog):
        event = Event(eventType="ORDER_CREATED", eventId="E1")
        result = BatchResult(items=[ItemResult(index=0, outcome=ItemOutcome.SUPPRESS, event_id="E1")])

        with caplog.at_level(logging.INFO):
            observer = LoggingObserver()
            observer.on_decision(event, Decision.SUPPRESS, 300)
            observer.on_batch_complete(result)

        assert "Duplicate event_id=E1" in caplog.text
        assert "status=SUCCESS total=1 proceeded=0 suppressed=1 failed=0" in caplog.text

    def test_missing_event_id_not_reported_as_missing_policy(self, caplog):
        event = Event(eventType="ORDER_CREATED", eventId="")

        with caplog.at_level(logging.DEBUG):
            LoggingObserver().on_decision(event, Decision.PROCEED, 300)

        assert "Missing eventId for event_type=ORDER_CREATED" in caplog.text
        assert "No dedup policy" not in caplog.text
