"""Streaming primitives: SSE event decoding and the output sink."""

from .sink import OutputSink
from .sse_decoder import ServerSentEvent, SSEDecoder


__all__ = ["OutputSink", "SSEDecoder", "ServerSentEvent"]
