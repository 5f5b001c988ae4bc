"""FastAPI application factory for ybproxy."""

import sys
from typing import Annotated

import httpx
import structlog
from fastapi import FastAPI, Query, Request
from starlette.responses import StreamingResponse

from ybproxy import __version__
from ybproxy.config.settings import Settings, get_settings
from ybproxy.core.logging import setup_logging
from ybproxy.models.openai import ChatConfig, OpenAIFunction, OpenAITool
from ybproxy.services.stream_transformer import ChunkTransformer

from .streaming import create_streaming_response


logger = structlog.get_logger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override. If None, uses get_settings().

    Returns:
        Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    if not structlog.is_configured():
        setup_logging(
            json_logs=settings.logging.use_json(sys.stderr.isatty()),
            log_level_name=settings.logging.level,
            log_file=settings.logging.file,
        )

    app = FastAPI(
        title="ybproxy",
        description="OpenAI-compatible streaming adapter for the Yuanbao chat protocol",
        version=__version__,
    )
    app.state.settings = settings

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    @app.post("/v1/replay")
    async def replay(
        request: Request,
        model: str = "hunyuan",
        tool: Annotated[list[str] | None, Query()] = None,
    ) -> StreamingResponse:
        """Transform a captured vendor SSE body posted as the request body."""
        body = await request.body()
        upstream = httpx.Response(
            200,
            headers={
                "content-type": request.headers.get(
                    "content-type", "text/event-stream"
                )
            },
            content=body,
        )
        config = ChatConfig(
            model_name=model,
            tools=tuple(
                OpenAITool(function=OpenAIFunction(name=name)) for name in tool or []
            ),
        )
        transformer = ChunkTransformer(
            upstream, config, [], settings=settings.streaming
        )
        logger.info(
            "replay_request", model=model, tools=len(config.tools), bytes=len(body)
        )
        return create_streaming_response(
            transformer.stream(),
            request_id=request.headers.get("x-request-id"),
        )

    return app
