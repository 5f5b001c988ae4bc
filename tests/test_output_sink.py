"""Tests for the frame sink between producer and HTTP consumer."""

import asyncio

import pytest

from ybproxy.streaming.sink import OutputSink


async def drain(sink: OutputSink) -> list[bytes]:
    return [frame async for frame in sink]


@pytest.mark.unit
class TestOutputSink:
    async def test_fifo_order(self) -> None:
        sink = OutputSink()
        for frame in (b"a", b"b", b"c"):
            sink.enqueue(frame)
        sink.close()

        assert await drain(sink) == [b"a", b"b", b"c"]
        assert sink.frames_enqueued == 3

    async def test_enqueue_after_close_fails(self) -> None:
        sink = OutputSink()
        sink.close()

        with pytest.raises(RuntimeError):
            sink.enqueue(b"late")

    async def test_close_is_idempotent(self) -> None:
        sink = OutputSink()
        sink.enqueue(b"x")
        sink.close()
        sink.close()

        assert sink.closed
        assert await drain(sink) == [b"x"]

    async def test_consumer_waits_for_producer(self) -> None:
        sink = OutputSink()
        consumer = asyncio.create_task(drain(sink))

        await asyncio.sleep(0)
        assert not consumer.done()

        sink.enqueue(b"x")
        sink.close()

        assert await consumer == [b"x"]
