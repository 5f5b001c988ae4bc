"""FIFO byte sink connecting the stream transformer to the HTTP layer."""

import asyncio
from collections.abc import AsyncIterator

import structlog


logger = structlog.get_logger(__name__)

_CLOSED = object()


class OutputSink:
    """Unbounded producer/consumer queue of encoded SSE frames.

    The producer enqueues frames as soon as they are decided and closes the
    sink exactly once; a consumer iterates until the sink is closed and
    drained. Frames are delivered in enqueue order.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False
        self.frames_enqueued = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def enqueue(self, frame: bytes) -> None:
        if self._closed:
            raise RuntimeError("output sink is closed")
        self._queue.put_nowait(frame)
        self.frames_enqueued += 1

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)
        logger.debug("output_sink_closed", frames=self.frames_enqueued)

    async def __aiter__(self) -> AsyncIterator[bytes]:
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            assert isinstance(item, bytes)
            yield item
