"""OpenAI-compatible Pydantic models for ybproxy.

Request-side models describe what a downstream OpenAI client sends (messages,
tools) and the per-stream ``ChatConfig`` derived from it. Response-side models
describe the ``chat.completion.chunk`` frames written to the output stream.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field


OpenAIMessageRole = Literal["system", "user", "assistant", "tool"]
OpenAIContentType = Literal["text", "image_url", "image", "file"]
OpenAIFinishReason = Literal["stop", "tool_calls", "length", "error"]
ToolType = Literal["function"]
ChatType = Literal["t2t", "t2v", "t2i", "search", "artifacts"]


# OpenAI Message Models
class OpenAIMessageContent(BaseModel):
    """Content part within an OpenAI message - text, image or file."""

    type: Annotated[OpenAIContentType, Field(description="Content type")]
    text: Annotated[str | None, Field(description="Text content")] = None
    image_url: Annotated[
        dict[str, str] | None, Field(description="Image URL information")
    ] = None
    file_url: Annotated[
        dict[str, str] | None, Field(description="File URL information")
    ] = None

    model_config = ConfigDict(extra="ignore")


class OpenAIMessage(BaseModel):
    """OpenAI-compatible message model."""

    role: Annotated[
        OpenAIMessageRole, Field(description="The role of the message sender")
    ]
    content: Annotated[
        str | list[OpenAIMessageContent],
        Field(description="The content of the message"),
    ] = ""
    tool_calls: Annotated[
        list[dict[str, Any]] | None,
        Field(
            description="Tool calls made by the assistant (only for assistant messages)"
        ),
    ] = None
    tool_call_id: str | None = Field(
        None,
        description="Tool call this message is responding to (only for tool messages)",
    )

    model_config = ConfigDict(extra="ignore")

    def text_content(self) -> str:
        """Concatenate the textual parts of the message.

        Image and file parts carry no text and contribute nothing.
        """
        if isinstance(self.content, str):
            return self.content
        return "".join(
            part.text or "" for part in self.content if part.type == "text"
        )


# OpenAI Tool Models
class OpenAIFunction(BaseModel):
    """OpenAI function definition."""

    name: str = Field(..., description="The name of the function")
    description: str | None = Field(
        None, description="A description of what the function does"
    )
    parameters: dict[str, Any] = Field(
        default_factory=dict,
        description="The parameters the function accepts, described as a JSON Schema object",
    )
    strict: bool | None = Field(None, description="Enable strict schema adherence")

    model_config = ConfigDict(extra="ignore")


class OpenAITool(BaseModel):
    """OpenAI tool definition."""

    type: ToolType = Field("function", description="The type of tool")
    function: OpenAIFunction = Field(..., description="The function definition")

    model_config = ConfigDict(extra="ignore")


class ChatFeatures(BaseModel):
    """Vendor feature switches requested for a conversation."""

    thinking: bool = Field(False, description="Ask the vendor for reasoning output")
    searching: bool = Field(False, description="Enable web search")
    deepsearching: bool = Field(False, description="Enable deep research mode")

    model_config = ConfigDict(frozen=True)


class ChatConfig(BaseModel):
    """Immutable configuration for a single stream transformation."""

    model_name: str = Field(..., description="Model name reported in every frame")
    tools: tuple[OpenAITool, ...] = Field(
        default=(), description="Tools declared by the client request"
    )
    tool_choice: Literal["auto", "required", "none"] = Field(
        "auto", description="Client tool choice"
    )
    features: ChatFeatures = Field(
        default_factory=ChatFeatures, description="Vendor feature switches"
    )
    chat_id: str = Field("", description="Vendor conversation identifier")
    chat_type: ChatType = Field("t2t", description="Vendor chat type")
    stream: bool = Field(True, description="Whether the client asked for streaming")

    model_config = ConfigDict(frozen=True)

    @property
    def has_tools(self) -> bool:
        return len(self.tools) > 0


# OpenAI Streaming Response Models
class OpenAIUsage(BaseModel):
    """OpenAI usage statistics."""

    prompt_tokens: int = Field(..., description="Number of tokens in the prompt", ge=0)
    completion_tokens: int = Field(
        ..., description="Number of tokens in the generated completion", ge=0
    )
    total_tokens: int = Field(
        ..., description="Total number of tokens used in the request", ge=0
    )

    @classmethod
    def create(cls, prompt_tokens: int, completion_tokens: int) -> "OpenAIUsage":
        return cls(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        )


class OpenAIFunctionCall(BaseModel):
    """OpenAI function call details."""

    name: str = Field(..., description="The name of the function")
    arguments: str = Field(
        ..., description="The arguments passed to the function as JSON string"
    )


class OpenAIToolCall(BaseModel):
    """OpenAI tool call in a streaming delta."""

    id: str = Field(..., description="The ID of the tool call")
    type: ToolType = Field("function", description="The type of tool call")
    function: OpenAIFunctionCall = Field(
        ..., description="The function that was called"
    )


class OpenAIStreamingDelta(BaseModel):
    """Delta carried by one streaming choice."""

    role: OpenAIMessageRole = Field(
        "assistant", description="The role of the message sender"
    )
    content: str = Field("", description="The content delta")
    reasoning_content: str = Field("", description="The reasoning delta")
    tool_calls: list[OpenAIToolCall] | None = Field(
        None, description="Tool calls delta"
    )


class OpenAIStreamingChoice(BaseModel):
    """OpenAI streaming choice."""

    index: int = Field(0, description="The index of the choice")
    delta: OpenAIStreamingDelta = Field(
        default_factory=OpenAIStreamingDelta, description="The delta content"
    )
    finish_reason: OpenAIFinishReason | None = Field(
        None, description="The reason the model stopped generating tokens"
    )


class StreamErrorDetail(BaseModel):
    """Error object embedded in a streaming chunk."""

    message: str = Field(..., description="Human-readable error message")
    type: str = Field("server error", description="Error type identifier")


class OpenAIStreamingChunk(BaseModel):
    """One ``chat.completion.chunk`` frame."""

    id: str = Field(..., description="Identifier shared by every chunk of a stream")
    model: str = Field(..., description="The model used for the chat completion")
    object: Literal["chat.completion.chunk"] = "chat.completion.chunk"
    choices: list[OpenAIStreamingChoice] = Field(
        default_factory=lambda: [OpenAIStreamingChoice()],
        description="Exactly one streaming choice",
    )
    citations: list[str] = Field(
        default_factory=list, description="Search result URLs backing the answer"
    )
    created: int = Field(
        ..., description="The Unix timestamp of when the chunk was created"
    )
    usage: OpenAIUsage | None = Field(
        None, description="Usage statistics (terminal chunk only)"
    )
    error: StreamErrorDetail | None = Field(
        None, description="Error details when the stream failed"
    )

    @property
    def delta(self) -> OpenAIStreamingDelta:
        return self.choices[0].delta

    def to_payload(self) -> dict[str, Any]:
        """Dump to the wire shape; optional sections are omitted when unset."""
        data = self.model_dump(mode="json")
        for key in ("usage", "error"):
            if data[key] is None:
                del data[key]
        for choice in data["choices"]:
            if not choice["delta"].get("tool_calls"):
                choice["delta"].pop("tool_calls", None)
        return data


__all__ = [
    "ChatConfig",
    "ChatFeatures",
    "OpenAIFinishReason",
    "OpenAIFunction",
    "OpenAIFunctionCall",
    "OpenAIMessage",
    "OpenAIMessageContent",
    "OpenAIStreamingChoice",
    "OpenAIStreamingChunk",
    "OpenAIStreamingDelta",
    "OpenAITool",
    "OpenAIToolCall",
    "OpenAIUsage",
    "StreamErrorDetail",
]
