"""Message and content block types for the Messages API.

Provides:
- Role enumeration
- Content blocks (text, image, tool use, tool result) plus an opaque
  fallback for block kinds this library does not know yet
- Message and MessageRequest
"""

from __future__ import annotations

import base64
import mimetypes
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    field_validator,
)

ModelId = str
"""Opaque model identifier, e.g. ``"claude-3-5-sonnet-20240620"``."""


class Role(str, Enum):
    """Message role enumeration."""

    USER = "user"
    ASSISTANT = "assistant"


class ImageSource(BaseModel):
    """Image source: inline base64 data or a URL."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    source_type: Literal["base64", "url"] = Field(alias="type")
    media_type: str | None = None
    data: str | None = None
    url: str | None = None

    @classmethod
    def from_base64(cls, data: str, media_type: str) -> ImageSource:
        """Create from base64 encoded data."""
        return cls(source_type="base64", media_type=media_type, data=data)

    @classmethod
    def from_url(cls, url: str) -> ImageSource:
        """Create from URL."""
        return cls(source_type="url", url=url)


class TextBlock(BaseModel):
    """Plain text content."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class ImageBlock(BaseModel):
    """Image content."""

    model_config = ConfigDict(frozen=True)

    type: Literal["image"] = "image"
    source: ImageSource

    @classmethod
    def from_file(cls, path: str | Path) -> ImageBlock:
        """Create an image block from a local file.

        Args:
            path: Path to the image file

        Returns:
            ImageBlock with base64 encoded image data
        """
        file_path = Path(path)
        encoded = base64.standard_b64encode(file_path.read_bytes()).decode("ascii")
        media_type = mimetypes.guess_type(str(file_path))[0] or "application/octet-stream"
        return cls(source=ImageSource.from_base64(encoded, media_type))


class ToolUseBlock(BaseModel):
    """Tool invocation requested by the model."""

    model_config = ConfigDict(frozen=True)

    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class ToolResultBlock(BaseModel):
    """Result of a tool execution, sent back by the caller."""

    model_config = ConfigDict(frozen=True)

    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str
    content: str | list[TextBlock | ImageBlock] | None = None
    is_error: bool | None = None


class UnknownBlock(BaseModel):
    """A block kind this library does not model.

    Every field is kept as received and serialized back unchanged.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    type: str

    @property
    def raw(self) -> dict[str, Any]:
        """All fields of the block, including ``type``."""
        return self.model_dump()


_KNOWN_BLOCK_TYPES = frozenset({"text", "image", "tool_use", "tool_result"})


def _block_tag(value: Any) -> str:
    kind = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    return kind if kind in _KNOWN_BLOCK_TYPES else "unknown"


ContentBlock = Annotated[
    Annotated[TextBlock, Tag("text")]
    | Annotated[ImageBlock, Tag("image")]
    | Annotated[ToolUseBlock, Tag("tool_use")]
    | Annotated[ToolResultBlock, Tag("tool_result")]
    | Annotated[UnknownBlock, Tag("unknown")],
    Discriminator(_block_tag),
]
"""Tagged union over content block kinds, with an opaque fallback."""


class Message(BaseModel):
    """A single conversation turn.

    Examples:
        >>> Message.user("Hello!")
        >>> Message(role=Role.USER, content=[TextBlock(text="Describe:"), ImageBlock.from_file("a.png")])
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    content: list[ContentBlock]

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [{"type": "text", "text": value}]
        return value

    @classmethod
    def user(cls, text: str) -> Message:
        """Create a user message with text content."""
        return cls(role=Role.USER, content=[TextBlock(text=text)])

    @classmethod
    def assistant(cls, text: str) -> Message:
        """Create an assistant message with text content."""
        return cls(role=Role.ASSISTANT, content=[TextBlock(text=text)])

    def get_text_content(self) -> str:
        """Concatenate the text of all text blocks."""
        return "".join(block.text for block in self.content if isinstance(block, TextBlock))


class MessageMetadata(BaseModel):
    """An object describing metadata about the request."""

    model_config = ConfigDict(frozen=True)

    user_id: str | None = None


class MessageRequest(BaseModel):
    """Request for the Messages endpoint.

    Construction does not enforce the request invariants; they are checked
    by ``build_payload`` before anything is sent, so that an invalid request
    fails as a ``ValidationError`` without I/O.

    Example:
        >>> request = MessageRequest(
        ...     model="claude-3-5-sonnet-20240620",
        ...     max_tokens=1024,
        ...     messages=[Message.user("Hello")],
        ... ).with_temperature(0.2)
    """

    model_config = ConfigDict(frozen=True)

    model: ModelId
    """The model that will complete the prompt."""

    messages: list[Message] = Field(default_factory=list)
    """Input messages, oldest first."""

    max_tokens: int
    """Maximum number of tokens to generate before stopping."""

    metadata: MessageMetadata | None = None
    stop_sequences: list[str] | None = None
    stream: bool | None = None
    system: str | None = None
    temperature: float | None = None
    top_k: int | None = None
    top_p: float | None = None

    def with_metadata(self, metadata: MessageMetadata) -> MessageRequest:
        return self.model_copy(update={"metadata": metadata})

    def with_stop_sequences(self, stop_sequences: list[str]) -> MessageRequest:
        return self.model_copy(update={"stop_sequences": list(stop_sequences)})

    def with_stream(self, stream: bool) -> MessageRequest:
        return self.model_copy(update={"stream": stream})

    def with_system(self, system: str) -> MessageRequest:
        return self.model_copy(update={"system": system})

    def with_temperature(self, temperature: float) -> MessageRequest:
        return self.model_copy(update={"temperature": temperature})

    def with_top_k(self, top_k: int) -> MessageRequest:
        return self.model_copy(update={"top_k": top_k})

    def with_top_p(self, top_p: float) -> MessageRequest:
        return self.model_copy(update={"top_p": top_p})
