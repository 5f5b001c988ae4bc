"""Parser splitting an assistant transcript into text and tool-use blocks.

Tool invocations are written inline by the model as::

    <tool_use>
    <tool_name>search</tool_name>
    <arguments>{"q": "weather"}</arguments>
    </tool_use>

The parser is a pure function of the whole transcript. A block is ``partial``
while more input could still change it: trailing text (the model may keep
writing or open a tool invocation) and a tool invocation whose closing tag has
not arrived yet.
"""

import re

from ybproxy.models.blocks import Block, TextBlock, ToolUseBlock, ToolUseParams


TOOL_USE_OPEN = "<tool_use>"
TOOL_USE_CLOSE = "</tool_use>"

_TOOL_NAME = re.compile(r"<tool_name>(.*?)(?:</tool_name>|$)", re.DOTALL)
_ARGUMENTS = re.compile(r"<arguments>(.*?)(?:</arguments>|$)", re.DOTALL)


def _parse_params(body: str) -> ToolUseParams:
    name = _TOOL_NAME.search(body)
    arguments = _ARGUMENTS.search(body)
    return ToolUseParams(
        tool_name=name.group(1).strip() if name else "",
        arguments=arguments.group(1).strip() if arguments else "",
    )


def parse_assistant_message(message: str) -> list[Block]:
    """Split ``message`` into ordered blocks.

    Whitespace-only text between blocks is dropped; text content is trimmed.
    """
    blocks: list[Block] = []
    pos = 0

    while pos < len(message):
        start = message.find(TOOL_USE_OPEN, pos)
        if start < 0:
            text = message[pos:].strip()
            if text:
                blocks.append(TextBlock(content=text, partial=True))
            break

        text = message[pos:start].strip()
        if text:
            blocks.append(TextBlock(content=text, partial=False))

        body_start = start + len(TOOL_USE_OPEN)
        end = message.find(TOOL_USE_CLOSE, body_start)
        if end < 0:
            blocks.append(
                ToolUseBlock(params=_parse_params(message[body_start:]), partial=True)
            )
            break

        blocks.append(
            ToolUseBlock(params=_parse_params(message[body_start:end]), partial=False)
        )
        pos = end + len(TOOL_USE_CLOSE)

    return blocks
