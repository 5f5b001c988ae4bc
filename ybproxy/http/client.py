"""HTTP client for the vendor streaming chat endpoint.

Request bodies are built by the caller and passed through untouched; this
module only owns connection settings and hands the open streaming response to
the stream transformer.
"""

from collections.abc import AsyncGenerator, AsyncIterator, Sequence
from contextlib import asynccontextmanager
from types import TracebackType
from typing import Any

import httpx
import structlog

from ybproxy.config.settings import StreamingSettings, UpstreamSettings
from ybproxy.models.openai import ChatConfig, OpenAIMessage
from ybproxy.services.stream_transformer import ChunkTransformer


logger = structlog.get_logger(__name__)


class YuanbaoClient:
    """Thin async client around ``httpx.AsyncClient`` for streaming chats."""

    def __init__(
        self,
        settings: UpstreamSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Upstream endpoint configuration
            client: Existing HTTP client to reuse; one is created otherwise
        """
        self.settings = settings or UpstreamSettings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(
                connect=10.0, read=self.settings.timeout, write=30.0, pool=30.0
            ),
        )

    @property
    def url(self) -> str:
        return f"{self.settings.base_url}{self.settings.chat_path}"

    @asynccontextmanager
    async def stream_chat(
        self, payload: dict[str, Any], headers: dict[str, str] | None = None
    ) -> AsyncGenerator[httpx.Response, None]:
        """Open a streaming chat request and yield the live response."""
        request_headers = {
            "Accept": "text/event-stream",
            **self.settings.headers,
            **(headers or {}),
        }
        logger.debug("upstream_request_started", url=self.url)
        async with self._client.stream(
            "POST", self.url, json=payload, headers=request_headers
        ) as response:
            logger.debug(
                "upstream_response_received",
                url=self.url,
                status_code=response.status_code,
                content_type=response.headers.get("content-type"),
            )
            yield response

    async def stream_openai(
        self,
        payload: dict[str, Any],
        config: ChatConfig,
        messages: Sequence[OpenAIMessage],
        headers: dict[str, str] | None = None,
        streaming_settings: StreamingSettings | None = None,
    ) -> AsyncIterator[bytes]:
        """Stream a chat and yield OpenAI-compatible SSE frames."""
        async with self.stream_chat(payload, headers=headers) as response:
            transformer = ChunkTransformer(
                response, config, messages, settings=streaming_settings
            )
            async for frame in transformer.stream():
                yield frame

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "YuanbaoClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
