"""Expose transformed frames as an ASGI streaming response."""

from collections.abc import AsyncIterator

from starlette.responses import StreamingResponse


STREAMING_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",  # Disable nginx buffering
}


def create_streaming_response(
    frames: AsyncIterator[bytes],
    headers: dict[str, str] | None = None,
    request_id: str | None = None,
) -> StreamingResponse:
    """Wrap an async iterator of SSE frames in a ``StreamingResponse``.

    Args:
        frames: Encoded SSE frames, e.g. ``ChunkTransformer.stream()``
        headers: Extra response headers
        request_id: Echoed back as ``X-Request-ID`` when given

    Returns:
        A ``text/event-stream`` response that drains ``frames``
    """
    final_headers = {**STREAMING_HEADERS, **(headers or {})}
    if request_id:
        final_headers["X-Request-ID"] = request_id
    return StreamingResponse(
        frames, media_type="text/event-stream", headers=final_headers
    )
