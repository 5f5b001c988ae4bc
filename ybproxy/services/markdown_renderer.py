"""Markdown rendering for structural vendor chunks.

Structural chunks (outlines, dividers, entity tables, inline media) have no
OpenAI delta counterpart, so they are rendered to Markdown and streamed as
ordinary assistant content.
"""

import re
from collections.abc import Callable
from typing import Any

import structlog

from ybproxy.models.yuanbao import (
    IGNORED_CHUNK_TYPES,
    DividerLineChunk,
    OutlineChunk,
    RelevantEntitiesChunk,
    ReplaceChunk,
)


logger = structlog.get_logger(__name__)

OUTLINE_HEADING = "# 研究大纲"
ENTITIES_HEADING = "# 相关组织及人物"

# [3](@ref) or [1,2,5](@ref)
REFERENCE_PATTERN = re.compile(r"\[(\d+(?:,\d+)*)\]\(@ref\)")


def format_reference_links(text: str) -> str:
    """Rewrite ``[1,2](@ref)`` citation markers to ``[1][2]``."""
    return REFERENCE_PATTERN.sub(
        lambda match: "".join(f"[{n}]" for n in match.group(1).split(",")), text
    )


def _table_cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\r\n", "<br>").replace("\n", "<br>")


def markdown_table(headers: list[str], rows: list[list[str]]) -> str:
    lines = [
        "| " + " | ".join(_table_cell(h) for h in headers) + " |",
        "| " + " | ".join("---" for _ in headers) + " |",
    ]
    lines.extend("| " + " | ".join(_table_cell(c) for c in row) + " |" for row in rows)
    return "\n".join(lines)


def render_outline(chunk: dict[str, Any]) -> str | None:
    outline = OutlineChunk.model_validate(chunk)
    items = "\n".join(f"- {item}" for item in outline.outline_list)
    return f"{OUTLINE_HEADING}\n{items}"


def render_replace(chunk: dict[str, Any]) -> str | None:
    replace = ReplaceChunk.model_validate(chunk)
    medias = replace.replace.multimedias if replace.replace else []
    images = "\n".join(
        f"![image]({media.url})"
        for media in medias
        if media.media_type == "image" and media.url
    )
    if not images:
        return None
    return f"\n{images}\n"


def render_divider_line(chunk: dict[str, Any]) -> str | None:
    divider = DividerLineChunk.model_validate(chunk)
    return f"\n# {divider.divider_text}\n"


def render_relevant_entities(chunk: dict[str, Any]) -> str | None:
    entities = RelevantEntitiesChunk.model_validate(chunk)
    table = markdown_table(
        ["name", "desc"],
        [
            [format_reference_links(e.name), format_reference_links(e.desc)]
            for e in entities.entity_list
        ],
    )
    return f"\n{ENTITIES_HEADING}\n{table}"


RENDERERS: dict[str, Callable[[dict[str, Any]], str | None]] = {
    "outline": render_outline,
    "replace": render_replace,
    "dividerLine": render_divider_line,
    "relevantEntities": render_relevant_entities,
}


def render_chunk(chunk: dict[str, Any]) -> str | None:
    """Render a structural chunk to Markdown, or None when it has no output."""
    chunk_type = chunk.get("type")
    renderer = RENDERERS.get(chunk_type) if isinstance(chunk_type, str) else None
    if renderer is not None:
        return renderer(chunk)

    if chunk_type not in IGNORED_CHUNK_TYPES:
        logger.info("vendor_chunk_unrecognized", chunk_type=chunk_type, chunk=chunk)
    return None
