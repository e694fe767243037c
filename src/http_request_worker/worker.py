"""Worker entry point: queue delivery -> parse -> POST -> outcome queue."""

import httpx

from .config import WorkerConfig, get_config
from .dispatcher import post_request
from .errors import ParseError
from .logging import get_logger, logging_context
from .models.delivery import Delivery
from .models.message import RequestDescriptor
from .outcome import OutcomeQueue, OutcomeSink
from .parser import parse_delivery

logger = get_logger(__name__)


def make_outcome_queue(config: WorkerConfig | None = None) -> OutcomeQueue:
    """Outcome queue sized from configuration."""
    config = config or get_config()
    return OutcomeQueue(maxsize=config.OUTCOME_QUEUE_SIZE)


async def process_delivery(
    delivery: Delivery,
    sink: OutcomeSink,
    config: WorkerConfig | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RequestDescriptor | None:
    """
    Process a single queue delivery.

    Returns the dispatched descriptor, or None when the delivery could not be
    parsed. Unparseable deliveries are never dispatched and nothing is put on
    the sink for them; the caller should remove them from the queue since a
    redelivery would fail the same way.
    """
    config = config or get_config()

    try:
        request = parse_delivery(delivery)
    except ParseError as e:
        logger.error(
            'delivery.rejected',
            error=str(e),
            error_type=type(e).__name__,
            body_length=len(delivery.body),
        )
        return None

    with logging_context(message_id=request.message_id, retry_count=request.retry_count):
        await post_request(request, config.HTTP_TIMEOUT_SECONDS, sink, transport=transport)

    return request

