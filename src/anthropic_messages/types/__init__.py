"""
Types layer - content model, responses and stream events.
"""

from anthropic_messages.types.events import (
    EVENT_TYPES,
    BlockDelta,
    ContentBlockDeltaEvent,
    ContentBlockStartEvent,
    ContentBlockStopEvent,
    ErrorDetail,
    ErrorEvent,
    InputJsonDelta,
    MessageDeltaBody,
    MessageDeltaEvent,
    MessageDeltaUsage,
    MessageStartEvent,
    MessageStopEvent,
    PingEvent,
    StreamEvent,
    TextDelta,
    UnknownDelta,
    UnknownEvent,
)
from anthropic_messages.types.message import (
    ContentBlock,
    ImageBlock,
    ImageSource,
    Message,
    MessageMetadata,
    MessageRequest,
    ModelId,
    Role,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
    UnknownBlock,
)
from anthropic_messages.types.response import MessageResponse, StopReason, Usage

__all__ = [
    "EVENT_TYPES",
    "BlockDelta",
    # Message types
    "ContentBlock",
    # Event types
    "ContentBlockDeltaEvent",
    "ContentBlockStartEvent",
    "ContentBlockStopEvent",
    "ErrorDetail",
    "ErrorEvent",
    "ImageBlock",
    "ImageSource",
    "InputJsonDelta",
    "Message",
    "MessageDeltaBody",
    "MessageDeltaEvent",
    "MessageDeltaUsage",
    "MessageMetadata",
    "MessageRequest",
    # Response types
    "MessageResponse",
    "MessageStartEvent",
    "MessageStopEvent",
    "ModelId",
    "PingEvent",
    "Role",
    "StopReason",
    "StreamEvent",
    "TextBlock",
    "TextDelta",
    "ToolResultBlock",
    "ToolUseBlock",
    "UnknownBlock",
    "UnknownDelta",
    "UnknownEvent",
    "Usage",
]
