"""Blocks produced by the assistant message parser."""

from dataclasses import dataclass, field
from typing import Literal


@dataclass(frozen=True)
class TextBlock:
    """Plain assistant text between tool invocations."""

    content: str
    partial: bool = False
    type: Literal["text"] = "text"


@dataclass(frozen=True)
class ToolUseParams:
    tool_name: str = ""
    arguments: str = ""


@dataclass(frozen=True)
class ToolUseBlock:
    """A tool invocation embedded in the transcript."""

    params: ToolUseParams = field(default_factory=ToolUseParams)
    partial: bool = False
    type: Literal["tool_use"] = "tool_use"


Block = TextBlock | ToolUseBlock
