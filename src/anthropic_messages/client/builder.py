"""
Request payload construction.

``build_payload`` validates a MessageRequest and serializes it into the JSON
body sent to the Messages endpoint. It performs no I/O, so an invalid
request fails before any connection is opened.
"""

from __future__ import annotations

import math
from typing import Any

from anthropic_messages.errors import ValidationError
from anthropic_messages.types import (
    ContentBlock,
    ImageBlock,
    ImageSource,
    Message,
    MessageRequest,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
    UnknownBlock,
)


def build_payload(request: MessageRequest) -> dict[str, Any]:
    """Validate a request and serialize it.

    Optional fields that are unset are omitted from the payload rather than
    sent as null.

    Args:
        request: The request to send

    Returns:
        JSON-ready mapping

    Raises:
        ValidationError: If the request is malformed
    """
    _validate_request(request)

    payload = request.model_dump(
        mode="json",
        exclude_none=True,
        by_alias=True,
        exclude={"messages"},
    )
    payload["messages"] = [_serialize_message(m) for m in request.messages]
    return payload


def _serialize_message(message: Message) -> dict[str, Any]:
    return {
        "role": message.role.value,
        "content": [_serialize_block(block) for block in message.content],
    }


def _serialize_block(block: ContentBlock) -> dict[str, Any]:
    # Opaque blocks go back exactly as received, nulls included
    if isinstance(block, UnknownBlock):
        return block.raw
    return block.model_dump(mode="json", exclude_none=True, by_alias=True)


def _validate_request(request: MessageRequest) -> None:
    if not request.model:
        raise ValidationError("model must not be empty", field="model")

    if isinstance(request.max_tokens, bool) or request.max_tokens <= 0:
        raise ValidationError(
            "max_tokens must be a positive integer",
            field="max_tokens",
            actual=request.max_tokens,
        )

    if not request.messages:
        raise ValidationError("messages must not be empty", field="messages").with_hint(
            "add at least one user message"
        )

    for i, message in enumerate(request.messages):
        path = f"messages[{i}].content"
        if not message.content:
            raise ValidationError("message has no content blocks", field=path)
        for j, block in enumerate(message.content):
            _validate_block(block, f"{path}[{j}]")

    _check_unit_interval(request.temperature, "temperature")
    _check_unit_interval(request.top_p, "top_p")

    if request.top_k is not None and request.top_k < 1:
        raise ValidationError("top_k must be at least 1", field="top_k", actual=request.top_k)

    if request.stop_sequences is not None:
        for i, seq in enumerate(request.stop_sequences):
            if not seq:
                raise ValidationError(
                    "stop sequence must not be empty", field=f"stop_sequences[{i}]"
                )


def _check_unit_interval(value: float | None, name: str) -> None:
    if value is None:
        return
    if math.isnan(value) or not 0.0 <= value <= 1.0:
        raise ValidationError(f"{name} must be between 0 and 1", field=name, actual=value)


def _validate_block(block: ContentBlock, path: str) -> None:
    if isinstance(block, TextBlock):
        if not block.text:
            raise ValidationError("text block must not be empty", field=f"{path}.text")
    elif isinstance(block, ImageBlock):
        _validate_image_source(block.source, f"{path}.source")
    elif isinstance(block, ToolUseBlock):
        if not block.id:
            raise ValidationError("tool_use block requires an id", field=f"{path}.id")
        if not block.name:
            raise ValidationError("tool_use block requires a name", field=f"{path}.name")
    elif isinstance(block, ToolResultBlock):
        if not block.tool_use_id:
            raise ValidationError(
                "tool_result block requires a tool_use_id", field=f"{path}.tool_use_id"
            )
        if isinstance(block.content, list):
            for k, inner in enumerate(block.content):
                _validate_block(inner, f"{path}.content[{k}]")
    elif isinstance(block, UnknownBlock) and not block.type:
        raise ValidationError("content block requires a type", field=f"{path}.type")


def _validate_image_source(source: ImageSource, path: str) -> None:
    if source.source_type == "base64":
        if not source.data:
            raise ValidationError("base64 image requires data", field=f"{path}.data")
        if not source.media_type:
            raise ValidationError(
                "base64 image requires a media_type", field=f"{path}.media_type"
            )
    elif not source.url:
        raise ValidationError("url image requires a url", field=f"{path}.url")
