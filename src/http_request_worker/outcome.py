"""
Outcome stream between dispatch attempts and the acknowledgement layer.

Many concurrent ``post_request`` calls put completed descriptors here; one or
more consumers take them off to ack or requeue the original queue messages.
The queue is bounded and ``put`` blocks while it is full, so producers slow
down to the consumers' pace and no outcome is ever discarded. Outcomes of
different messages arrive in completion order, not delivery order.
"""

import asyncio
from typing import AsyncIterator, Protocol

from .logging import get_logger
from .models.message import RequestDescriptor

logger = get_logger(__name__)


class OutcomeSink(Protocol):
    """Anything a dispatch attempt can report its completed descriptor to."""

    async def put(self, request: RequestDescriptor) -> None: ...


class OutcomeQueue:
    """
    Bounded multi-producer outcome queue backed by asyncio.Queue.

    Usage:
        outcomes = OutcomeQueue(maxsize=100)
        asyncio.create_task(post_request(request, 30, outcomes))
        async for request in outcomes:
            ack(request) if request.disposition.acknowledge else requeue(request)
    """

    def __init__(self, maxsize: int = 100):
        if maxsize < 1:
            raise ValueError('OutcomeQueue must be bounded (maxsize >= 1)')
        self._queue: asyncio.Queue[RequestDescriptor] = asyncio.Queue(maxsize=maxsize)

    @property
    def maxsize(self) -> int:
        return self._queue.maxsize

    def qsize(self) -> int:
        return self._queue.qsize()

    def full(self) -> bool:
        return self._queue.full()

    async def put(self, request: RequestDescriptor) -> None:
        """Enqueue a completed descriptor, waiting while the queue is full."""
        if not request.dispatched:
            raise ValueError(f'Descriptor {request.message_id} has no outcome recorded')
        if self._queue.full():
            logger.debug('outcome.backpressure', message_id=request.message_id, maxsize=self.maxsize)
        await self._queue.put(request)

    async def get(self) -> RequestDescriptor:
        """Wait for the next completed descriptor."""
        request = await self._queue.get()
        self._queue.task_done()
        return request

    def __aiter__(self) -> AsyncIterator[RequestDescriptor]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[RequestDescriptor]:
        while True:
            yield await self.get()
