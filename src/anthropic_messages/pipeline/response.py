"""
Non-streaming response decoding.

Turns a buffered HTTP response into a MessageResponse, or a non-2xx
response into the matching ApiError.
"""

from __future__ import annotations

import json
from collections.abc import Mapping

import pydantic

from anthropic_messages.errors import (
    ApiError,
    DecodeError,
    HttpError,
    TransportError,
    parse_retry_after,
)
from anthropic_messages.types import MessageResponse


def decode_message_response(body: bytes | str) -> MessageResponse:
    """Decode a 2xx JSON body into a MessageResponse.

    Unknown fields are ignored; unknown content block kinds are kept as
    UnknownBlock.

    Raises:
        DecodeError: If the body is not JSON or misses required fields
    """
    try:
        return MessageResponse.model_validate_json(body)
    except pydantic.ValidationError as e:
        text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
        raise DecodeError(
            f"Response did not match the message schema: {e.error_count()} error(s)",
            body=text,
            cause=e,
        ) from e


def error_from_response(
    status_code: int,
    body: bytes | str,
    headers: Mapping[str, str] | None = None,
    *,
    url: str | None = None,
) -> ApiError:
    """Map a non-2xx response to an ApiError.

    A JSON object body becomes an HttpError classified by its ``error.type``.
    Anything else becomes a TransportError carrying the status and raw text.
    """
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    lowered = {k.lower(): v for k, v in (headers or {}).items()}

    try:
        parsed = json.loads(text)
    except ValueError:
        parsed = None

    if isinstance(parsed, dict):
        return HttpError.from_body(status_code, parsed, lowered)

    return TransportError(
        f"HTTP {status_code} with unparseable body",
        url=url,
        status_code=status_code,
        body=text,
        retry_after=parse_retry_after(lowered),
    )
