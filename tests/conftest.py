"""Shared test fixtures for ybproxy tests."""

from collections.abc import Callable
from typing import Any

import pytest

from tests.helpers import FakeUpstreamResponse
from ybproxy.core.logging import setup_logging
from ybproxy.models.blocks import Block
from ybproxy.models.openai import (
    ChatConfig,
    OpenAIFunction,
    OpenAIMessage,
    OpenAITool,
)
from ybproxy.services.stream_transformer import ChunkTransformer


def pytest_configure(config: pytest.Config) -> None:
    """Route test logging through the application pipeline."""
    setup_logging(json_logs=False, log_level_name="DEBUG")


@pytest.fixture
def plain_config() -> ChatConfig:
    return ChatConfig(model_name="hunyuan-t1")


@pytest.fixture
def tool_config() -> ChatConfig:
    return ChatConfig(
        model_name="hunyuan-t1",
        tools=(
            OpenAITool(
                function=OpenAIFunction(
                    name="search",
                    description="Search the web",
                    parameters={
                        "type": "object",
                        "properties": {"q": {"type": "string"}},
                    },
                )
            ),
        ),
    )


@pytest.fixture
def messages() -> list[OpenAIMessage]:
    return [
        OpenAIMessage(role="system", content="You are helpful."),
        OpenAIMessage(role="user", content="What is the weather?"),
    ]


@pytest.fixture
def make_transformer(
    messages: list[OpenAIMessage],
) -> Callable[..., ChunkTransformer]:
    """Build a transformer over canned chunks with deterministic identifiers."""

    def _make(
        config: ChatConfig,
        chunks: list[bytes],
        block_parser: Callable[[str], list[Block]] | None = None,
        **response_kwargs: Any,
    ) -> ChunkTransformer:
        counter = iter(range(1000))
        kwargs: dict[str, Any] = {
            "message_id": "chatcmpl-test",
            "tool_call_id_factory": lambda: f"call_{next(counter)}",
        }
        if block_parser is not None:
            kwargs["block_parser"] = block_parser
        return ChunkTransformer(
            FakeUpstreamResponse(chunks, **response_kwargs),
            config,
            messages,
            **kwargs,
        )

    return _make
