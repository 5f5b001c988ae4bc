"""Vendor stream to OpenAI SSE transformation.

The transformer reads a vendor (Yuanbao) streaming response, folds every
vendor event into a running transcript and writes OpenAI
``chat.completion.chunk`` frames into an :class:`OutputSink`.

Two emission modes exist:

- Without declared tools each text or reasoning fragment is forwarded as its
  own frame as soon as it arrives.
- With declared tools the whole transcript is re-parsed into blocks after
  every event. Only the first block that has not been sent yet is a
  candidate, and only once it is complete; at most one block is emitted per
  vendor event. Tool invocations become OpenAI tool calls.

The stream always ends with a terminal frame carrying usage estimates,
followed by ``data: [DONE]``. Upstream failures are reported as an ``error``
object inside a regular chunk because headers are already sent by then.
"""

import asyncio
import codecs
from collections.abc import AsyncIterator, Callable, Sequence
from typing import Any, Protocol

import structlog

from ybproxy.config.settings import StreamingSettings
from ybproxy.models.blocks import Block, TextBlock
from ybproxy.models.openai import (
    ChatConfig,
    OpenAIMessage,
    OpenAIStreamingChunk,
    OpenAIUsage,
)
from ybproxy.models.yuanbao import (
    ChunkKind,
    MetaChunk,
    SearchGuidChunk,
    TextChunk,
    ThinkChunk,
)
from ybproxy.services.assistant_message import parse_assistant_message
from ybproxy.services.chunk_classifier import classify_chunk, decode_chunk
from ybproxy.services.markdown_renderer import render_chunk
from ybproxy.services.openai_streaming_formatter import (
    OpenAIStreamingFormatter,
    generate_message_id,
    generate_tool_call_id,
)
from ybproxy.streaming.sink import OutputSink
from ybproxy.streaming.sse_decoder import ServerSentEvent, SSEDecoder
from ybproxy.utils.token_counting import TokenCounter


logger = structlog.get_logger(__name__)

EVENT_STREAM_CONTENT_TYPE = "text/event-stream"
REJECTED_MESSAGE = "rejected by server"
UNKNOWN_ERROR_MESSAGE = "unknown error"


class UpstreamResponse(Protocol):
    """The subset of ``httpx.Response`` the transformer reads from."""

    @property
    def headers(self) -> Any: ...

    async def aread(self) -> bytes: ...

    def aiter_bytes(self) -> AsyncIterator[bytes]: ...


def _is_html(content_type: str, body: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type == "text/html":
        return True
    head = body.lstrip()[:15].lower()
    return head.startswith("<!doctype html") or head.startswith("<html")


class ChunkTransformer:
    """Transforms one vendor streaming response into OpenAI SSE frames."""

    def __init__(
        self,
        response: UpstreamResponse,
        config: ChatConfig,
        messages: Sequence[OpenAIMessage],
        *,
        block_parser: Callable[[str], list[Block]] = parse_assistant_message,
        token_counter: TokenCounter | None = None,
        tool_call_id_factory: Callable[[], str] = generate_tool_call_id,
        message_id: str | None = None,
        settings: StreamingSettings | None = None,
    ) -> None:
        """Initialize the transformer.

        Args:
            response: Upstream streaming response
            config: Per-stream chat configuration
            messages: Input messages, used for prompt token estimation
            block_parser: Splits the transcript into text/tool-use blocks
            token_counter: Usage estimator
            tool_call_id_factory: Generates identifiers for emitted tool calls
            message_id: Identifier shared by every frame, generated if omitted
            settings: Reasoning delimiters and related behaviour
        """
        self.response = response
        self.config = config
        self.messages = list(messages)
        self.message_id = message_id or generate_message_id()
        self.settings = settings or StreamingSettings()
        self.formatter = OpenAIStreamingFormatter()
        self.token_counter = token_counter or TokenCounter()
        self.sink = OutputSink()

        self._block_parser = block_parser
        self._tool_call_id_factory = tool_call_id_factory
        self._decoder = SSEDecoder(self._handle_event)
        self._callbacks: list[Callable[[], None]] = []
        self._reader: asyncio.Task[None] | None = None
        self._finished = False

        # Per-stream accumulation state
        self.content = ""
        self.citations: list[str] = []
        self.sent_block_index = -1

        self.logger = logger.bind(
            message_id=self.message_id, model=config.model_name
        )

    # Public API

    def on_done(self, callback: Callable[[], None]) -> None:
        """Register a callback invoked once after the stream is closed."""
        self._callbacks.append(callback)

    def start(self) -> "asyncio.Task[None]":
        """Start reading the upstream response in the background."""
        if self._reader is None:
            self._reader = asyncio.create_task(self.read())
        return self._reader

    def get_stream(self) -> AsyncIterator[bytes]:
        """Return the encoded SSE frames, starting the reader if needed."""
        return self.stream()

    async def stream(self) -> AsyncIterator[bytes]:
        reader = self.start()
        try:
            async for frame in self.sink:
                yield frame
            await reader
        finally:
            if not reader.done():
                reader.cancel()
                try:
                    await reader
                except asyncio.CancelledError:
                    self.logger.info("stream_consumer_disconnected")

    async def read(self) -> None:
        """Read the upstream response to completion.

        Always terminates the stream: the sink is closed and completion
        callbacks have run when this returns.
        """
        self.logger.debug(
            "stream_transformation_started",
            tools=len(self.config.tools),
            messages=len(self.messages),
        )
        try:
            content_type = self.response.headers.get("content-type", "") or ""
            if EVENT_STREAM_CONTENT_TYPE not in content_type.lower():
                body = (await self.response.aread()).decode("utf-8", errors="replace")
                self.logger.warning(
                    "upstream_not_event_stream",
                    content_type=content_type,
                    status_code=getattr(self.response, "status_code", None),
                    body_preview=body[:200],
                )
                self._send_error(
                    REJECTED_MESSAGE if _is_html(content_type, body) else body
                )
                self._finish()
                return

            text_decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
            async for raw in self.response.aiter_bytes():
                self._decoder.feed(text_decoder.decode(raw))
            self._decoder.feed(text_decoder.decode(b"", final=True))
            self._finish()

        except asyncio.CancelledError:
            self.logger.info("stream_transformation_cancelled")
            self.sink.close()
            raise
        except Exception as e:
            if self._finished:
                raise
            self.logger.error("stream_read_failed", error=str(e), exc_info=e)
            self._send_error(str(e) or UNKNOWN_ERROR_MESSAGE)
            self._finish()
        finally:
            self.sink.close()

    # Vendor event handling

    def _handle_event(self, event: ServerSentEvent) -> None:
        chunk = decode_chunk(event.data)
        if chunk is None:
            return

        kind = classify_chunk(chunk)

        if kind is ChunkKind.TEXT:
            text = TextChunk.model_validate(chunk).msg
            if text:
                self._send(content=text)

        elif kind is ChunkKind.THINKING:
            thinking = ThinkChunk.model_validate(chunk).content
            if thinking:
                self._send(reasoning_content=thinking)

        elif kind is ChunkKind.SEARCHING_DONE:
            # May arrive several times as the result set grows; replace wholesale
            search = SearchGuidChunk.model_validate(chunk)
            self.citations = [doc.url for doc in search.docs if doc.url]
            self._send(citations=self.citations)

        elif kind is ChunkKind.START:
            meta = MetaChunk.model_validate(chunk)
            self.logger.debug(
                "vendor_stream_meta",
                vendor_message_id=meta.message_id,
                trace_id=meta.trace_id,
            )

        else:
            markdown = render_chunk(chunk)
            if markdown:
                self._send(content=markdown)

    # Emission

    def _new_chunk(
        self,
        content: str = "",
        reasoning_content: str = "",
        citations: list[str] | None = None,
    ) -> OpenAIStreamingChunk:
        return self.formatter.new_chunk(
            self.message_id,
            self.config.model_name,
            content=content,
            reasoning_content=reasoning_content,
            citations=citations,
        )

    def _enqueue(self, chunk: OpenAIStreamingChunk) -> None:
        self.sink.enqueue(self.formatter.format_chunk(chunk).encode("utf-8"))

    def _send(
        self,
        content: str = "",
        reasoning_content: str = "",
        citations: list[str] | None = None,
    ) -> None:
        self.content += reasoning_content + content
        chunk = self._new_chunk(content, reasoning_content, citations)

        if not self.config.has_tools:
            self._enqueue(chunk)
            return

        self._emit_next_block(chunk)

    def _send_error(self, message: str) -> None:
        chunk = self._new_chunk()
        self.formatter.set_error(chunk, message)
        self._enqueue(chunk)

    def _split_reasoning(self, text: str) -> tuple[str, str]:
        """Split a text block into (content, reasoning_content)."""
        open_tag = self.settings.reasoning_open_tag
        close_tag = self.settings.reasoning_close_tag
        open_index = text.find(open_tag)
        close_index = text.find(close_tag)
        if open_index < 0 or close_index < 0:
            return text, ""
        return (
            text[close_index + len(close_tag) :],
            text[open_index + len(open_tag) : close_index],
        )

    def _emit_next_block(self, chunk: OpenAIStreamingChunk) -> bool:
        """Emit the block after the last sent one if it is complete.

        Returns True when a frame was enqueued.
        """
        blocks = self._block_parser(self.content)
        index = self.sent_block_index + 1
        if index >= len(blocks) or blocks[index].partial:
            return False

        block = blocks[index]
        if isinstance(block, TextBlock):
            content, reasoning = self._split_reasoning(block.content)
            chunk.delta.content = content
            chunk.delta.reasoning_content = reasoning
        else:
            self.formatter.set_tool_call(
                chunk,
                self._tool_call_id_factory(),
                block.params.tool_name,
                block.params.arguments,
            )

        self._enqueue(chunk)
        self.sent_block_index = index
        self.logger.debug("block_emitted", index=index, block_type=block.type)
        self.formatter.reset_delta(chunk)
        return True

    def _finish(self) -> None:
        """Emit the terminal frame and [DONE], close the sink, run callbacks."""
        if self._finished:
            return
        self._finished = True

        chunk = self._new_chunk()
        if self.config.has_tools:
            # Citations seen while output was withheld would otherwise be lost
            chunk.citations = list(self.citations)
            if self.sent_block_index == -1:
                # Nothing survived the block protocol; flush raw text instead
                chunk.delta.content = self.content
            else:
                while self._emit_next_block(chunk):
                    pass
                remaining = self._block_parser(self.content)[
                    self.sent_block_index + 1 :
                ]
                chunk.delta.content = "".join(
                    block.content for block in remaining if isinstance(block, TextBlock)
                )

        prompt_tokens = self.token_counter.count_messages_tokens(self.messages)
        completion_tokens = self.token_counter.count_tokens(self.content)
        chunk.usage = OpenAIUsage.create(prompt_tokens, completion_tokens)
        chunk.choices[0].finish_reason = "stop"

        self._enqueue(chunk)
        self.sink.enqueue(self.formatter.format_done().encode("utf-8"))
        self.sink.close()

        self.logger.info(
            "stream_transformation_completed",
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            blocks_sent=self.sent_block_index + 1,
            frames=self.sink.frames_enqueued,
        )

        for callback in self._callbacks:
            try:
                callback()
            except Exception as e:
                self.logger.error(
                    "stream_done_callback_failed", error=str(e), exc_info=e
                )
