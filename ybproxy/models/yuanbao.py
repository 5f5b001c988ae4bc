"""Vendor (Yuanbao) streaming chunk models.

The vendor stream is loosely typed: every ``data:`` line is a JSON object
tagged by a ``type`` field. Only the kinds the adapter renders are modelled;
fields default, and nullable ones accept ``null``, so that partially
populated chunks still validate.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ChunkKind(str, Enum):
    """Semantic kind assigned to a vendor chunk by the classifier."""

    TEXT = "TEXT"
    THINKING = "THINKING"
    SEARCHING_DONE = "SEARCHING_DONE"
    START = "START"
    NONE = "NONE"


# Discriminant value -> kind; everything else is NONE
CHUNK_KINDS: dict[str, ChunkKind] = {
    "text": ChunkKind.TEXT,
    "think": ChunkKind.THINKING,
    "searchGuid": ChunkKind.SEARCHING_DONE,
    "meta": ChunkKind.START,
}

# Structural kinds that carry nothing worth rendering
IGNORED_CHUNK_TYPES = frozenset({"components", "mindmap", "meta", "step"})


class VendorChunk(BaseModel):
    """Base for vendor chunks; accepts camelCase wire names."""

    type: str

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class TextChunk(VendorChunk):
    type: str = "text"
    msg: str | None = None
    is_title: bool = False


class ThinkChunk(VendorChunk):
    type: str = "think"
    title: str = ""
    content: str | None = None


class SearchResult(VendorChunk):
    type: str = "search"
    index: int = 0
    title: str = ""
    url: str | None = None
    source_name: str = ""


class SearchGuidChunk(VendorChunk):
    type: str = "searchGuid"
    title: str = ""
    docs: list[SearchResult] = Field(default_factory=list)

    @field_validator("docs", mode="before")
    @classmethod
    def null_docs_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class MetaChunk(VendorChunk):
    type: str = "meta"
    message_id: str = ""
    trace_id: str = ""


class OutlineChunk(VendorChunk):
    type: str = "outline"
    outline_list: list[str] = Field(default_factory=list)


class ReplaceMedia(VendorChunk):
    type: str = ""
    media_type: str = ""
    url: str | None = None
    preview_url: str | None = None
    desc: str | None = None


class ReplacePayload(BaseModel):
    id: str = ""
    display: str = ""
    multimedias: list[ReplaceMedia] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")

    @field_validator("multimedias", mode="before")
    @classmethod
    def null_multimedias_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class ReplaceChunk(VendorChunk):
    type: str = "replace"
    replace: ReplacePayload | None = None


class DividerLineChunk(VendorChunk):
    type: str = "dividerLine"
    divider_text: str = ""


class RelevantEntity(VendorChunk):
    type: str = ""
    name: str = ""
    desc: str = ""
    reference: list[int] = Field(default_factory=list)


class RelevantEntitiesChunk(VendorChunk):
    type: str = "relevantEntities"
    entity_list: list[RelevantEntity] = Field(default_factory=list)
