"""
Raw queue delivery as seen by the parser.

The parser only reads ``body``, ``timestamp`` and ``headers``, so any AMQP
client message exposing those attributes can be passed in directly.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping


@dataclass(frozen=True)
class Delivery:
    """One message as delivered by the queue."""

    body: bytes

    # Producer-set creation time (AMQP ``timestamp`` property), if any
    timestamp: datetime | int | None = None

    # Untyped attribute table (AMQP message headers); never trusted
    headers: Mapping[str, Any] | None = None
