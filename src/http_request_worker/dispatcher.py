"""
Dispatcher: turns one RequestDescriptor into one outbound HTTP POST.

Each call makes exactly one attempt and reports exactly one outcome to the
sink. Retries are the queue's job: a RETRY_ELIGIBLE outcome is requeued by
the acknowledgement layer and comes back later as a new delivery with an
incremented x-death count.

Outcome classification, in order:
- request cannot be built            -> DROPPED
- transport error or timeout          -> RETRY_ELIGIBLE
- 4xx                                 -> DROPPED
- 2xx                                 -> ACCEPTED
- anything else (1xx, 3xx, 5xx)       -> RETRY_ELIGIBLE
"""

import asyncio
import time

import httpx
import structlog

from .errors import (
    ClientStatusError,
    ConstructionError,
    ServerStatusError,
    StatusError,
    wrap_transport_error,
)
from .logging import get_logger
from .models.message import Disposition, RequestDescriptor
from .outcome import OutcomeSink

logger = get_logger(__name__)

RESPONSE_READ_ERROR_BODY = 'Error encountered when reading POST response body'


def classify_status(status_code: int) -> Disposition:
    """Map an HTTP status code to a disposition (4xx checked before 2xx)."""
    if 400 <= status_code <= 499:
        return Disposition.DROPPED
    if 200 <= status_code <= 299:
        return Disposition.ACCEPTED
    return Disposition.RETRY_ELIGIBLE


def status_error(status_code: int, status_text: str) -> StatusError | None:
    """Build the error recorded for a non-2xx status, or None on success."""
    disposition = classify_status(status_code)
    if disposition is Disposition.ACCEPTED:
        return None
    if disposition is Disposition.DROPPED:
        return ClientStatusError(
            f"4XX status on http POST (no retry): {status_text}", status_code=status_code
        )
    return ServerStatusError(f"Error on http POST: {status_text}", status_code=status_code)


def build_request(client: httpx.AsyncClient, request: RequestDescriptor) -> httpx.Request:
    """
    Build the outbound POST for a descriptor.

    Raises:
        ConstructionError: URL or headers cannot form a valid http(s) request
    """
    context = {'url': request.url}
    try:
        http_request = client.build_request(
            'POST',
            request.url,
            content=request.body,
            # UTF-8 bytes: httpx would reject non-ASCII str values
            headers={key: value.encode('utf-8') for key, value in request.headers.items()},
        )
    except (httpx.InvalidURL, ValueError, TypeError) as e:
        context['error_type'] = type(e).__name__
        raise ConstructionError(f"Invalid http request: {e}", context=context) from e

    if http_request.url.scheme not in ('http', 'https') or not http_request.url.host:
        raise ConstructionError(
            "Invalid http request: URL must be absolute http(s) with a host",
            context=context,
        )
    return http_request


async def post_request(
    request: RequestDescriptor,
    timeout_seconds: float,
    sink: OutcomeSink,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    """
    POST the descriptor's request and report the classified outcome to the sink.

    Args:
        request: Parsed descriptor; its outcome fields are filled in here
        timeout_seconds: Hard limit for the whole attempt (send and body read)
        sink: Receives the descriptor once the outcome is recorded
        transport: Optional httpx transport (tests inject httpx.MockTransport)
    """
    t0 = time.monotonic()
    log = logger.bind(
        message_id=request.message_id,
        url=request.url,
        retry_count=request.retry_count,
    )

    log.info('dispatch.started')

    async with httpx.AsyncClient(timeout=timeout_seconds, transport=transport) as client:
        await _attempt(client, request, timeout_seconds, log)

    log.info(
        'dispatch.complete',
        disposition=request.disposition.value,
        status_text=request.status_text,
        error=str(request.dispatch_error) if request.dispatch_error else None,
        dispatch_time_ms=int((time.monotonic() - t0) * 1000),
    )

    await sink.put(request)


async def _attempt(
    client: httpx.AsyncClient,
    request: RequestDescriptor,
    timeout_seconds: float,
    log: structlog.stdlib.BoundLogger,
) -> None:
    """Run the Built -> Sent -> outcome state machine once, recording the outcome."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout_seconds

    # ------------------------------------------------------------------
    # Built
    # ------------------------------------------------------------------
    try:
        http_request = build_request(client, request)
    except ConstructionError as e:
        log.warning('dispatch.invalid_request', error=str(e))
        request.record_outcome(Disposition.DROPPED, status_text=e.message, error=e)
        return

    # ------------------------------------------------------------------
    # Sent
    # ------------------------------------------------------------------
    try:
        response = await asyncio.wait_for(
            client.send(http_request, stream=True), timeout=timeout_seconds
        )
    except (httpx.HTTPError, asyncio.TimeoutError) as e:
        error = wrap_transport_error(e, context={'timeout_seconds': timeout_seconds})
        log.warning('dispatch.transport_error', error=str(error))
        request.record_outcome(Disposition.RETRY_ELIGIBLE, status_text=error.message, error=error)
        return

    # The body is captured but not used for classification, so a read failure
    # keeps the status already received.
    try:
        await asyncio.wait_for(response.aread(), timeout=max(deadline - loop.time(), 0))
        response_body = response.text
    except (httpx.HTTPError, asyncio.TimeoutError) as e:
        log.info('dispatch.response_read_failed', error=str(e) or type(e).__name__)
        response_body = RESPONSE_READ_ERROR_BODY
    finally:
        await response.aclose()

    # ------------------------------------------------------------------
    # Classified
    # ------------------------------------------------------------------
    status_text = f'{response.status_code} {response.reason_phrase}'.strip()
    request.record_outcome(
        classify_status(response.status_code),
        status_text=status_text,
        response_body=response_body,
        error=status_error(response.status_code, status_text),
    )
