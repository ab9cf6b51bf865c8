"""Response types for the Messages endpoint."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator

from anthropic_messages.types.message import ContentBlock, ModelId, Role, TextBlock


class StopReason(str, Enum):
    """Why the model stopped generating.

    Values the service introduces later decode as ``UNKNOWN``.
    """

    END_TURN = "end_turn"
    MAX_TOKENS = "max_tokens"
    STOP_SEQUENCE = "stop_sequence"
    TOOL_USE = "tool_use"
    UNKNOWN = "unknown"


def _coerce_stop_reason(value: Any) -> Any:
    if isinstance(value, str) and value not in StopReason._value2member_map_:
        return StopReason.UNKNOWN
    return value


class Usage(BaseModel):
    """Token usage reported by the service."""

    model_config = ConfigDict(frozen=True)

    input_tokens: int
    output_tokens: int


class MessageResponse(BaseModel):
    """A completed assistant message.

    Unrecognized fields in the response body are ignored.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    type: Literal["message"] = "message"
    model: ModelId
    role: Role
    content: list[ContentBlock]
    stop_reason: StopReason | None = None
    stop_sequence: str | None = None
    usage: Usage

    @field_validator("stop_reason", mode="before")
    @classmethod
    def _normalize_stop_reason(cls, value: Any) -> Any:
        return _coerce_stop_reason(value)

    @property
    def text(self) -> str:
        """Concatenated text of all text blocks."""
        return "".join(block.text for block in self.content if isinstance(block, TextBlock))
