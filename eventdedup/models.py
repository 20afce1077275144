"""Pydantic v2 models for data boundaries.

Event mirrors the JSON produced by upstream publishers (camelCase keys).
Decision/outcome types are what the engine and batch coordinator hand back.
"""

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Cache value used when an event carries no body
EMPTY_BODY_MARKER = "1"


class Decision(str, Enum):
    """Dedup decision for a single event."""

    PROCEED = "PROCEED"
    SUPPRESS = "SUPPRESS"


class ItemOutcome(str, Enum):
    """Per-item outcome of a batch."""

    PROCEED = "PROCEED"
    SUPPRESS = "SUPPRESS"
    DECODE_ERROR = "DECODE_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    CACHE_ERROR = "CACHE_ERROR"

    @property
    def is_error(self) -> bool:
        return self not in (ItemOutcome.PROCEED, ItemOutcome.SUPPRESS)


class BatchStatus(str, Enum):
    """Summary status of a whole batch."""

    SUCCESS = "SUCCESS"
    PARTIAL = "PARTIAL"
    FAILURE = "FAILURE"


class Event(BaseModel):
    """Inbound event (message body after URL-decoding).

    eventId must be unique per logical occurrence, not per delivery.
    """

    # Publishers may send numeric ids; keep them as strings
    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    id: str | None = Field(default=None, description="Internal identifier, unused by dedup")
    event_type: str = Field(default="", alias="eventType", description="Selects dedup policy")
    event_id: str = Field(default="", alias="eventId", description="Dedup cache key")
    created_at: int | None = Field(default=None, alias="createdAt", description="Originating timestamp")
    body: Any = Field(default=None, description="Opaque payload, stored as cache value")

    @field_validator("event_type", "event_id", mode="before")
    @classmethod
    def validate_key_fields(cls, v: Any) -> Any:
        """Treat null as empty."""
        return "" if v is None else v

    @property
    def is_dedupable(self) -> bool:
        """Both eventType and eventId are required for dedup to apply."""
        return bool(self.event_type) and bool(self.event_id)

    def cache_value(self) -> str:
        """Serialize body for storage in the cache."""
        if self.body is None or self.body == "":
            return EMPTY_BODY_MARKER
        if isinstance(self.body, str):
            return self.body
        return json.dumps(self.body, default=str, separators=(",", ":"))


class ItemResult(BaseModel):
    """Outcome of one batch item, attributable to its input index."""

    index: int = Field(..., description="Position in the input batch")
    outcome: ItemOutcome = Field(..., description="Decision or error tag")
    event_id: str | None = Field(default=None, description="eventId, if parsing got that far")
    event_type: str | None = Field(default=None, description="eventType, if parsing got that far")
    error: str | None = Field(default=None, description="Error message for error outcomes")
    should_process: bool = Field(
        default=False,
        description="Whether downstream processing should run for this item",
    )


class BatchResult(BaseModel):
    """Aggregated result of a batch invocation."""

    items: list[ItemResult] = Field(default_factory=list, description="Ordered per-item outcomes")

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def failed(self) -> int:
        return sum(1 for item in self.items if item.outcome.is_error)

    def count(self, outcome: ItemOutcome) -> int:
        return sum(1 for item in self.items if item.outcome == outcome)

    @property
    def status(self) -> BatchStatus:
        if self.failed == 0:
            return BatchStatus.SUCCESS
        if self.failed == self.total:
            return BatchStatus.FAILURE
        return BatchStatus.PARTIAL

    @property
    def summary(self) -> str:
        status = self.status
        if status == BatchStatus.SUCCESS:
            return "Successfully proceeded"
        if status == BatchStatus.PARTIAL:
            return f"Partially proceeded: {self.failed} of {self.total} items failed"
        return f"Failed to proceed: all {self.total} items failed"

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation for the HTTP surface."""
        return {
            "status": self.status.value,
            "summary": self.summary,
            "total": self.total,
            "failed": self.failed,
            "items": [item.model_dump(mode="json") for item in self.items],
        }
