"""Main entry point for the ybproxy command line."""

import asyncio
import sys
from pathlib import Path
from typing import Any

import httpx
import typer
import uvicorn
from pydantic import TypeAdapter, ValidationError
from rich.markup import escape

from ybproxy._version import __version__
from ybproxy.api.app import create_app
from ybproxy.config.logging import LoggingSettings
from ybproxy.config.settings import Settings, get_settings
from ybproxy.core.errors import ConfigurationError
from ybproxy.core.logging import get_logger, setup_logging
from ybproxy.models.openai import (
    ChatConfig,
    OpenAIFunction,
    OpenAIMessage,
    OpenAITool,
)
from ybproxy.services.stream_transformer import ChunkTransformer

from .helpers import get_console, parse_sse_frame


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        get_console().print(f"ybproxy {__version__}")
        raise typer.Exit()


app = typer.Typer(
    rich_markup_mode="rich",
    add_completion=False,
    no_args_is_help=True,
    pretty_exceptions_enable=False,
)

logger = get_logger(__name__)

_MESSAGES_ADAPTER = TypeAdapter(list[OpenAIMessage])


@app.callback()
def app_main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """ybproxy - OpenAI-compatible streaming adapter for the Yuanbao chat protocol."""


def _load_settings(log_level: str | None) -> Settings:
    try:
        settings = get_settings()
        if log_level:
            logging_settings = LoggingSettings(
                **{**settings.logging.model_dump(), "level": log_level}
            )
            settings = settings.model_copy(update={"logging": logging_settings})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
    return settings


def _load_messages(path: Path | None) -> list[OpenAIMessage]:
    if path is None:
        return []
    try:
        return _MESSAGES_ADAPTER.validate_json(path.read_bytes())
    except ValidationError as e:
        raise typer.BadParameter(f"Invalid messages file: {e}") from e


def _render_frame(data: dict[str, Any]) -> None:
    console = get_console()
    if "error" in data:
        console.print(f"[error]error:[/error] {escape(data['error']['message'])}")
        return

    choice = data["choices"][0]
    delta = choice["delta"]
    if delta.get("reasoning_content"):
        console.print(escape(delta["reasoning_content"]), style="reasoning", end="")
    if delta.get("content"):
        console.print(escape(delta["content"]), end="")
    for call in delta.get("tool_calls") or []:
        function = call["function"]
        console.print(
            f"\n[tool]tool call[/tool] {escape(function['name'])}"
            f" {escape(function['arguments'])}"
        )
    if data.get("citations") and "usage" not in data:
        for url in data["citations"]:
            console.print(f"[info]citation[/info] {escape(url)}")
    if "usage" in data:
        usage = data["usage"]
        console.print(
            f"\n[usage]prompt={usage['prompt_tokens']} "
            f"completion={usage['completion_tokens']} "
            f"total={usage['total_tokens']}[/usage]"
        )


async def _replay(transformer: ChunkTransformer, pretty: bool) -> None:
    async for frame in transformer.stream():
        text = frame.decode("utf-8")
        if not pretty:
            sys.stdout.write(text)
            sys.stdout.flush()
            continue
        data = parse_sse_frame(text)
        if data is not None:
            _render_frame(data)


@app.command()
def replay(
    dump: Path = typer.Argument(
        ...,
        help="Captured vendor response body (SSE) to replay",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    model: str = typer.Option(
        "hunyuan", "--model", "-m", help="Model name reported in frames"
    ),
    tools: list[str] | None = typer.Option(
        None,
        "--tool",
        "-t",
        help="Declare a tool by name (repeatable); enables tool call extraction",
    ),
    messages_file: Path | None = typer.Option(
        None,
        "--messages",
        help="JSON list of OpenAI messages used for prompt token estimation",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    content_type: str = typer.Option(
        "text/event-stream",
        "--content-type",
        help="Content type to pretend the upstream answered with",
    ),
    pretty: bool = typer.Option(
        False, "--pretty", "-p", help="Render text instead of raw SSE frames"
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Override the configured log level"
    ),
) -> None:
    """
    Replay a captured vendor stream through the transformer.

    Prints the OpenAI-compatible SSE frames the proxy would send.

    Examples:
        ybproxy replay dump.sse
        ybproxy replay dump.sse --tool search --pretty
    """
    try:
        settings = _load_settings(log_level)
    except ConfigurationError as e:
        get_console(stderr=True).print(f"[error]{escape(e.message)}[/error]")
        raise typer.Exit(1) from e

    setup_logging(
        json_logs=settings.logging.use_json(sys.stderr.isatty()),
        log_level_name=settings.logging.level,
        log_file=settings.logging.file,
    )

    tool_names = tools or []
    config = ChatConfig(
        model_name=model,
        tools=tuple(
            OpenAITool(function=OpenAIFunction(name=name)) for name in tool_names
        ),
    )
    response = httpx.Response(
        200, headers={"content-type": content_type}, content=dump.read_bytes()
    )
    transformer = ChunkTransformer(
        response,
        config,
        _load_messages(messages_file),
        settings=settings.streaming,
    )
    transformer.on_done(
        lambda: logger.debug(
            "replay_completed", dump=str(dump), tools=len(tool_names)
        )
    )
    asyncio.run(_replay(transformer, pretty))


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", min=1, max=65535, help="Bind port"),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Override the configured log level"
    ),
) -> None:
    """Serve the replay endpoint over HTTP."""
    try:
        settings = _load_settings(log_level)
    except ConfigurationError as e:
        get_console(stderr=True).print(f"[error]{escape(e.message)}[/error]")
        raise typer.Exit(1) from e

    setup_logging(
        json_logs=settings.logging.use_json(sys.stderr.isatty()),
        log_level_name=settings.logging.level,
        log_file=settings.logging.file,
    )
    logger.info("server_starting", host=host, port=port)
    uvicorn.run(create_app(settings), host=host, port=port, log_config=None)


def main() -> None:
    app()


if __name__ == "__main__":
    main()

