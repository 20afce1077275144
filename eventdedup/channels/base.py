"""Envelope decoder protocol interface.

Unified interface for transport envelopes (SQS records, HTTP batches).
"""

from typing import Any, Protocol

from eventdedup.models import Event


class EnvelopeDecoder(Protocol):
    """Protocol for envelope decoders."""

    def decode(self, envelope: Any) -> str:
        """Extract the raw message string from a transport envelope.

        Args:
            envelope: One item of the inbound batch

        Returns:
            Raw (decoded) message string

        Raises:
            DecodeError: If the body is missing or cannot be decoded
        """
        ...

    def parse(self, message: str) -> Event:
        """Deserialize a raw message string into an Event.

        Args:
            message: Output of decode()

        Returns:
            Validated Event

        Raises:
            ParseError: If the message is not a well-formed Event
        """
        ...
