"""Event deduplication for batched event ingestion."""

__version__ = "0.1.0"
