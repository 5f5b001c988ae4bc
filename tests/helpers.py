"""Helpers for building vendor streams and decoding emitted frames."""

import json
from collections.abc import AsyncIterator
from typing import Any

from ybproxy.services.stream_transformer import ChunkTransformer


class FakeUpstreamResponse:
    """Minimal stand-in for a streaming ``httpx.Response``."""

    def __init__(
        self,
        chunks: list[bytes],
        content_type: str = "text/event-stream",
        fail_with: BaseException | None = None,
        status_code: int = 200,
    ) -> None:
        self.headers = {"content-type": content_type}
        self.status_code = status_code
        self._chunks = chunks
        self._fail_with = fail_with

    async def aread(self) -> bytes:
        return b"".join(self._chunks)

    async def aiter_bytes(self) -> AsyncIterator[bytes]:
        for chunk in self._chunks:
            yield chunk
        if self._fail_with is not None:
            raise self._fail_with


def sse(*payloads: dict[str, Any] | str) -> bytes:
    """Encode vendor payloads as SSE ``data:`` events."""
    lines = []
    for payload in payloads:
        data = payload if isinstance(payload, str) else json.dumps(payload)
        lines.append(f"data: {data}\n\n")
    return "".join(lines).encode("utf-8")


def text(msg: str) -> dict[str, Any]:
    return {"type": "text", "msg": msg}


def think(content: str) -> dict[str, Any]:
    return {"type": "think", "title": "thinking", "content": content}


def parse_frames(raw: list[bytes]) -> list[Any]:
    """Decode emitted frames; the sentinel is returned as the string ``[DONE]``."""
    frames: list[Any] = []
    for frame in raw:
        decoded = frame.decode("utf-8")
        assert decoded.startswith("data: ")
        assert decoded.endswith("\n\n")
        payload = decoded[len("data: ") : -2]
        frames.append(payload if payload == "[DONE]" else json.loads(payload))
    return frames


async def run_transformer(transformer: ChunkTransformer) -> list[Any]:
    return parse_frames([frame async for frame in transformer.stream()])


def deltas(frames: list[Any]) -> list[dict[str, Any]]:
    """Deltas of every JSON frame, in order."""
    return [f["choices"][0]["delta"] for f in frames if isinstance(f, dict)]
