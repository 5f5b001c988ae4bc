"""OpenAI-format streaming formatter utilities.

Builds ``chat.completion.chunk`` frames and encodes them as Server-Sent Events.
"""

import json
import time
import uuid
from typing import Any

from ybproxy.models.openai import (
    OpenAIFunctionCall,
    OpenAIStreamingChunk,
    OpenAIToolCall,
    StreamErrorDetail,
)


DONE_FRAME = "data: [DONE]\n\n"


def generate_message_id() -> str:
    return f"chatcmpl-{uuid.uuid4().hex[:29]}"


def generate_tool_call_id() -> str:
    return f"call_{uuid.uuid4().hex[:24]}"


class OpenAIStreamingFormatter:
    """Formats streaming responses to match OpenAI's SSE format."""

    @staticmethod
    def format_data_event(data: dict[str, Any]) -> str:
        """
        Format a data event for OpenAI-compatible Server-Sent Events.

        Args:
            data: Event data dictionary

        Returns:
            Formatted SSE string
        """
        json_data = json.dumps(data, ensure_ascii=False, separators=(",", ":"))
        return f"data: {json_data}\n\n"

    @staticmethod
    def new_chunk(
        message_id: str,
        model: str,
        content: str = "",
        reasoning_content: str = "",
        citations: list[str] | None = None,
        created: int | None = None,
    ) -> OpenAIStreamingChunk:
        """
        Create an empty-ish chunk for the caller to fill in.

        Args:
            message_id: Identifier shared by the whole stream
            model: Model name being used
            content: Text content delta
            reasoning_content: Reasoning content delta
            citations: Current citation URLs
            created: Unix timestamp, defaults to now

        Returns:
            A mutable chunk model
        """
        chunk = OpenAIStreamingChunk(
            id=message_id,
            model=model,
            citations=list(citations or []),
            created=created if created is not None else int(time.time()),
        )
        chunk.delta.content = content
        chunk.delta.reasoning_content = reasoning_content
        return chunk

    @staticmethod
    def set_tool_call(
        chunk: OpenAIStreamingChunk, tool_call_id: str, name: str, arguments: str
    ) -> None:
        """Turn ``chunk`` into a single complete tool call frame."""
        chunk.delta.content = ""
        chunk.delta.reasoning_content = ""
        chunk.delta.tool_calls = [
            OpenAIToolCall(
                id=tool_call_id,
                function=OpenAIFunctionCall(name=name, arguments=arguments),
            )
        ]
        chunk.choices[0].finish_reason = "tool_calls"

    @staticmethod
    def reset_delta(chunk: OpenAIStreamingChunk) -> None:
        """Clear content, reasoning and tool calls after a frame was sent."""
        chunk.delta.content = ""
        chunk.delta.reasoning_content = ""
        chunk.delta.tool_calls = None
        chunk.choices[0].finish_reason = None

    @staticmethod
    def set_error(chunk: OpenAIStreamingChunk, message: str) -> None:
        chunk.error = StreamErrorDetail(message=message)

    @staticmethod
    def format_chunk(chunk: OpenAIStreamingChunk) -> str:
        return OpenAIStreamingFormatter.format_data_event(chunk.to_payload())

    @staticmethod
    def format_done() -> str:
        """
        Format the final DONE event.

        Returns:
            Formatted SSE termination string
        """
        return DONE_FRAME
