"""Tests for OpenAI chunk construction and SSE encoding."""

import json
import re

import pytest

from ybproxy.models.openai import OpenAIUsage
from ybproxy.services.openai_streaming_formatter import (
    DONE_FRAME,
    OpenAIStreamingFormatter,
    generate_message_id,
    generate_tool_call_id,
)


def decode(frame: str) -> dict:
    assert frame.startswith("data: ") and frame.endswith("\n\n")
    return json.loads(frame[len("data: ") : -2])


@pytest.mark.unit
class TestIdentifiers:
    def test_message_id_format(self) -> None:
        assert re.fullmatch(r"chatcmpl-[0-9a-f]{29}", generate_message_id())

    def test_tool_call_ids_are_unique(self) -> None:
        ids = {generate_tool_call_id() for _ in range(100)}

        assert len(ids) == 100
        assert all(re.fullmatch(r"call_[0-9a-f]{24}", i) for i in ids)


@pytest.mark.unit
class TestOpenAIStreamingFormatter:
    def test_new_chunk_defaults(self) -> None:
        chunk = OpenAIStreamingFormatter.new_chunk("chatcmpl-1", "hunyuan", created=10)

        assert decode(OpenAIStreamingFormatter.format_chunk(chunk)) == {
            "id": "chatcmpl-1",
            "model": "hunyuan",
            "object": "chat.completion.chunk",
            "choices": [
                {
                    "index": 0,
                    "delta": {
                        "role": "assistant",
                        "content": "",
                        "reasoning_content": "",
                    },
                    "finish_reason": None,
                }
            ],
            "citations": [],
            "created": 10,
        }

    def test_non_ascii_is_not_escaped(self) -> None:
        chunk = OpenAIStreamingFormatter.new_chunk("id", "m", content="你好")

        assert "你好" in OpenAIStreamingFormatter.format_chunk(chunk)

    def test_citations_are_copied(self) -> None:
        citations = ["https://a"]
        chunk = OpenAIStreamingFormatter.new_chunk("id", "m", citations=citations)
        citations.append("https://b")

        assert chunk.citations == ["https://a"]

    def test_tool_call(self) -> None:
        chunk = OpenAIStreamingFormatter.new_chunk("id", "m", content="discarded")

        OpenAIStreamingFormatter.set_tool_call(chunk, "call_1", "search", '{"q":1}')
        data = decode(OpenAIStreamingFormatter.format_chunk(chunk))

        choice = data["choices"][0]
        assert choice["finish_reason"] == "tool_calls"
        assert choice["delta"]["content"] == ""
        assert choice["delta"]["tool_calls"] == [
            {
                "id": "call_1",
                "type": "function",
                "function": {"name": "search", "arguments": '{"q":1}'},
            }
        ]

    def test_reset_delta(self) -> None:
        chunk = OpenAIStreamingFormatter.new_chunk("id", "m", content="x")
        OpenAIStreamingFormatter.set_tool_call(chunk, "call_1", "search", "{}")

        OpenAIStreamingFormatter.reset_delta(chunk)

        assert chunk.delta.content == ""
        assert chunk.delta.reasoning_content == ""
        assert chunk.delta.tool_calls is None
        assert chunk.choices[0].finish_reason is None

    def test_error_and_usage_sections(self) -> None:
        chunk = OpenAIStreamingFormatter.new_chunk("id", "m")
        OpenAIStreamingFormatter.set_error(chunk, "rejected by server")
        chunk.usage = OpenAIUsage.create(3, 4)

        data = decode(OpenAIStreamingFormatter.format_chunk(chunk))

        assert data["error"] == {"message": "rejected by server", "type": "server error"}
        assert data["usage"] == {
            "prompt_tokens": 3,
            "completion_tokens": 4,
            "total_tokens": 7,
        }

    def test_done_frame(self) -> None:
        assert OpenAIStreamingFormatter.format_done() == DONE_FRAME == "data: [DONE]\n\n"
