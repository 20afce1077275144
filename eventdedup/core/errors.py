"""Dedup error taxonomy.

Per-item errors (decode, parse, cache) are turned into ItemResult values by the
batch coordinator. Only InvalidInputShape is fatal for a whole invocation.
"""


class DedupError(Exception):
    """Base class for all dedup service errors."""


class ConfigLoadError(DedupError):
    """Policy configuration could not be read. Degrades to an empty policy table."""


class DecodeError(DedupError):
    """Envelope body could not be extracted or URL-decoded."""


class ParseError(DedupError):
    """Decoded message is not a well-formed Event."""


class CacheError(DedupError):
    """Cache unreachable or a cache operation failed. Dedup status is unknown."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class InvalidInputShape(DedupError):
    """Invocation input is not a batch (list of envelopes)."""
