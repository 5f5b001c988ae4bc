"""Classification of decoded vendor events."""

import json
import re
from typing import Any

import structlog

from ybproxy.core.errors import MalformedChunkError
from ybproxy.models.yuanbao import CHUNK_KINDS, ChunkKind


logger = structlog.get_logger(__name__)

# The vendor interleaves bare markers such as ``[plugin: ]`` or ``[MSGINDEX:1]``
# and lowercase status words with the JSON payloads. Only this leading-character
# shape is treated as a keep-alive; anything else must be a JSON object.
KEEP_ALIVE_PATTERN = re.compile(r"^[\[a-z]")


def is_keep_alive(data: str) -> bool:
    """Return True for vendor keep-alive / marker lines."""
    return bool(KEEP_ALIVE_PATTERN.match(data))


def decode_chunk(data: str) -> dict[str, Any] | None:
    """Decode one event ``data`` field into a vendor chunk.

    Returns None for empty data and keep-alive markers.

    Raises:
        MalformedChunkError: If the payload is not a JSON object
    """
    if not data or is_keep_alive(data):
        return None

    try:
        chunk = json.loads(data)
    except json.JSONDecodeError as e:
        raise MalformedChunkError(
            f"Malformed vendor payload: {e.msg} at position {e.pos}", raw=data
        ) from e

    if not isinstance(chunk, dict):
        raise MalformedChunkError(
            f"Vendor payload is not a JSON object: {type(chunk).__name__}", raw=data
        )
    return chunk


def classify_chunk(chunk: dict[str, Any]) -> ChunkKind:
    """Map a vendor chunk to its semantic kind by its ``type`` discriminant."""
    chunk_type = chunk.get("type")
    if not isinstance(chunk_type, str):
        return ChunkKind.NONE
    return CHUNK_KINDS.get(chunk_type, ChunkKind.NONE)
