"""Error taxonomy for anthropic-messages.

Every failure is an ApiError subclass carrying an ErrorKind tag.
"""

from anthropic_messages.errors.base import (
    ApiError,
    DecodeError,
    ErrorContext,
    ErrorKind,
    HttpError,
    IncompleteStreamError,
    ProtocolError,
    RetriesExhaustedError,
    StreamDecodeError,
    TransportError,
    ValidationError,
)
from anthropic_messages.errors.classification import (
    RETRYABLE_STATUS,
    RETRYABLE_TYPES,
    ServiceErrorType,
    classify_error,
    extract_error_message,
    is_retryable,
    parse_retry_after,
)

__all__ = [
    "RETRYABLE_STATUS",
    "RETRYABLE_TYPES",
    "ApiError",
    "DecodeError",
    "ErrorContext",
    "ErrorKind",
    "HttpError",
    "IncompleteStreamError",
    "ProtocolError",
    "RetriesExhaustedError",
    "ServiceErrorType",
    "StreamDecodeError",
    "TransportError",
    "ValidationError",
    "classify_error",
    "extract_error_message",
    "is_retryable",
    "parse_retry_after",
]
