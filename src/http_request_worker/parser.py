"""
Parse a raw queue delivery into a validated RequestDescriptor.

Body fields come from the JSON payload. Provenance, identity and retry
history come from the delivery's timestamp and its untyped header table;
every header is decoded by its own helper, and a header that is missing or
malformed degrades to a default instead of failing the parse.
"""

import hashlib
import time
from datetime import datetime, timezone
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from .errors import DecodeError, ValidationError
from .logging import get_logger
from .models.delivery import Delivery
from .models.message import MessageFields, RequestDescriptor

logger = get_logger(__name__)

EXPIRATION_HEADER = 'expiration'
MESSAGE_ID_HEADER = 'message_id'
DEATH_HISTORY_HEADER = 'x-death'


def parse_delivery(delivery: Delivery, log: Any = None) -> RequestDescriptor:
    """
    Build a RequestDescriptor from a queue delivery.

    Args:
        delivery: Raw delivery (body bytes, optional timestamp, optional headers)
        log: Diagnostics logger; defaults to this module's structlog logger

    Returns:
        RequestDescriptor with message_id and url always populated

    Raises:
        DecodeError: Body is not a valid JSON request payload
        ValidationError: Field 'url' is missing or empty
    """
    log = log or logger

    try:
        fields = MessageFields.model_validate_json(delivery.body)
    except PydanticValidationError as e:
        raise DecodeError(
            f"Message body is not a valid request payload: {e.error_count()} error(s)",
            context={'errors': e.errors(include_url=False, include_input=False)},
        ) from e

    if not fields.url:
        raise ValidationError("Field 'url' missing or empty")

    headers = delivery.headers or {}
    created_at = unix_seconds(delivery.timestamp) or 0

    expires_at = 0
    if EXPIRATION_HEADER in headers:
        expiration = decode_expiration(headers[EXPIRATION_HEADER], now=int(time.time()))
        if expiration is None:
            log.warning(
                'parse.expiration_invalid',
                value=repr(headers[EXPIRATION_HEADER]),
                detail='Header value is invalid or already past; default TTL will be used',
            )
        else:
            expires_at = expiration

    message_id = None
    if MESSAGE_ID_HEADER in headers:
        message_id = decode_message_id(headers[MESSAGE_ID_HEADER])
        if message_id is None:
            log.warning(
                'parse.message_id_invalid',
                value=repr(headers[MESSAGE_ID_HEADER]),
                detail='Header value is invalid or empty; md5 of the body will be used',
            )
    if message_id is None:
        message_id = body_message_id(delivery.body, created_at)

    retry_count, first_rejected_at = decode_retry_history(headers.get(DEATH_HISTORY_HEADER))

    request = RequestDescriptor(
        message_id=message_id,
        url=fields.url,
        headers=fields.flat_headers(),
        body=fields.body,
        created_at=created_at,
        expires_at=expires_at,
        retry_count=retry_count,
        first_rejected_at=first_rejected_at,
    )

    log.debug('parse.message_fields', **request.to_dict())
    log.debug(
        'parse.retry_history',
        message_id=message_id,
        retry_count=retry_count,
        first_rejected_at=first_rejected_at,
    )

    return request


# =============================================================================
# Header decoding helpers
# =============================================================================


def unix_seconds(value: Any) -> int | None:
    """Convert a datetime or non-negative int timestamp to unix seconds."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            # AMQP timestamps are UTC
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp())
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return None


def decode_expiration(value: Any, now: int) -> int | None:
    """Return the expiration as unix seconds, or None if it is not an integer or already past."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return None
    if not isinstance(value, int) or value < now:
        return None
    return value


def decode_message_id(value: Any) -> str | None:
    """Return the producer-supplied message ID, or None if it is not a non-empty string."""
    if isinstance(value, str) and value:
        return value
    return None


def body_message_id(body: bytes, created_at: int) -> str:
    """Derive a message ID from the body bytes, disambiguated by creation time."""
    message_id = hashlib.md5(body).hexdigest()
    if created_at > 0:
        message_id += f'-{created_at}'
    return message_id


def decode_retry_history(value: Any) -> tuple[int, int]:
    """
    Read (retry_count, first_rejected_at) from the x-death header.

    The history holds two entries in the wait-queue / main-queue dead-letter
    topology, one per queue, both carrying the same count. The second entry
    (main queue) is the one read. Any other shape means no usable history,
    which is also the normal first-attempt case, so (0, 0) is returned.
    """
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return 0, 0

    main_queue_history = value[1]
    if not isinstance(main_queue_history, Mapping):
        return 0, 0

    count = main_queue_history.get('count')
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        return 0, 0

    rejected_at = main_queue_history.get('time')
    if rejected_at is None:
        return count, 0
    first_rejected_at = unix_seconds(rejected_at)
    if first_rejected_at is None:
        return 0, 0
    return count, first_rejected_at
