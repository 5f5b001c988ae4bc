"""CLI helper utilities for ybproxy."""

import json
from typing import Any

from rich.console import Console
from rich.theme import Theme


CLI_THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "reasoning": "dim italic",
        "tool": "magenta",
        "usage": "dim cyan",
    }
)


def get_console(stderr: bool = False) -> Console:
    return Console(theme=CLI_THEME, stderr=stderr, highlight=False)


def parse_sse_frame(frame: str) -> dict[str, Any] | None:
    """Decode one ``data: {...}`` frame; None for ``[DONE]``."""
    payload = frame.strip()
    if payload.startswith("data:"):
        payload = payload[len("data:") :].strip()
    if not payload or payload == "[DONE]":
        return None
    data: dict[str, Any] = json.loads(payload)
    return data
