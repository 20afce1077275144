"""SQS-style envelope decoding.

Each record carries a "body" string holding a URL-encoded JSON event.
"""

from typing import Any
from urllib.parse import unquote_plus

from pydantic import ValidationError

from eventdedup.core.errors import DecodeError, ParseError
from eventdedup.models import Event

BODY = "body"


class SqsEnvelopeDecoder:
    """Decoder for SQS records ({"messageId": ..., "body": "<url-encoded JSON>"})."""

    def decode(self, envelope: Any) -> str:
        """URL-decode the record body ('+' becomes a space)."""
        if not isinstance(envelope, dict):
            raise DecodeError(f"Envelope must be an object, got {type(envelope).__name__}")
        body = envelope.get(BODY)
        if body is None:
            raise DecodeError("Envelope has no body")
        if not isinstance(body, str):
            raise DecodeError(f"Envelope body must be a string, got {type(body).__name__}")
        try:
            return unquote_plus(body, encoding="utf-8", errors="strict")
        except UnicodeDecodeError as e:
            raise DecodeError(f"Envelope body is not valid URL-encoded UTF-8: {e}") from e

    def parse(self, message: str) -> Event:
        """Validate the decoded JSON message as an Event."""
        try:
            return Event.model_validate_json(message)
        except ValidationError as e:
            raise ParseError(f"Malformed event: {e.errors()[0]['msg']}") from e

