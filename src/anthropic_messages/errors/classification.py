"""Service error classification.

Maps the ``error.type`` field of a service error body, or failing that the
HTTP status code, onto a fixed set of service error types.
"""

from __future__ import annotations

import contextlib
import time
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Any


class ServiceErrorType(str, Enum):
    """Service error classification.

    Values match the ``error.type`` strings sent by the service.
    """

    INVALID_REQUEST = "invalid_request_error"
    """Malformed request body or invalid parameters."""

    AUTHENTICATION = "authentication_error"
    """Missing or invalid API key."""

    PERMISSION = "permission_error"
    """Key is valid but not permitted to use the resource."""

    NOT_FOUND = "not_found_error"
    """Requested resource not found."""

    REQUEST_TOO_LARGE = "request_too_large"
    """Request exceeds the maximum allowed size."""

    RATE_LIMIT = "rate_limit_error"
    """Throttled due to request or token limits."""

    INTERNAL = "api_error"
    """Unexpected error inside the service."""

    OVERLOADED = "overloaded_error"
    """Service is temporarily overloaded."""

    OTHER = "other"
    """Unknown or unclassified error."""


# Statuses that are retried regardless of body classification
RETRYABLE_STATUS: frozenset[int] = frozenset({429, 500, 502, 503, 529})

RETRYABLE_TYPES: frozenset[ServiceErrorType] = frozenset(
    {ServiceErrorType.RATE_LIMIT, ServiceErrorType.OVERLOADED}
)

_DEFAULT_STATUS_MAPPING: dict[int, ServiceErrorType] = {
    400: ServiceErrorType.INVALID_REQUEST,
    401: ServiceErrorType.AUTHENTICATION,
    403: ServiceErrorType.PERMISSION,
    404: ServiceErrorType.NOT_FOUND,
    413: ServiceErrorType.REQUEST_TOO_LARGE,
    422: ServiceErrorType.INVALID_REQUEST,
    429: ServiceErrorType.RATE_LIMIT,
    500: ServiceErrorType.INTERNAL,
    502: ServiceErrorType.INTERNAL,
    503: ServiceErrorType.OVERLOADED,
    529: ServiceErrorType.OVERLOADED,
}


def classify_error(
    status_code: int | None,
    body: dict[str, Any] | None = None,
) -> ServiceErrorType:
    """Classify a service error.

    Args:
        status_code: HTTP status code (None for in-stream errors)
        body: Response body (parsed JSON)

    Returns:
        ServiceErrorType for the error
    """
    # The body's type is more specific than the status
    if body:
        error_obj = body.get("error")
        if isinstance(error_obj, dict):
            type_val = error_obj.get("type")
            if isinstance(type_val, str):
                with contextlib.suppress(ValueError):
                    return ServiceErrorType(type_val)

    if status_code is None:
        return ServiceErrorType.OTHER

    if status_code in _DEFAULT_STATUS_MAPPING:
        return _DEFAULT_STATUS_MAPPING[status_code]

    if 400 <= status_code < 500:
        return ServiceErrorType.INVALID_REQUEST
    if 500 <= status_code < 600:
        return ServiceErrorType.INTERNAL

    return ServiceErrorType.OTHER


def is_retryable(error_type: ServiceErrorType, status_code: int | None = None) -> bool:
    """Check if a service error is retryable by default.

    Args:
        error_type: Classified error type
        status_code: HTTP status code, if any

    Returns:
        True if the error is transient
    """
    if error_type in RETRYABLE_TYPES:
        return True
    return status_code is not None and status_code in RETRYABLE_STATUS


def extract_error_message(body: dict[str, Any] | None) -> str | None:
    """Extract the error message from a response body.

    Supports the service envelope ``{"type": "error", "error": {"message": ...}}``
    and a bare ``{"message": ...}``.

    Args:
        body: Response body (parsed JSON)

    Returns:
        Error message if found, None otherwise
    """
    if not body:
        return None

    if "error" in body:
        error = body["error"]
        if isinstance(error, dict):
            msg = error.get("message")
            if isinstance(msg, str):
                return msg
        elif isinstance(error, str):
            return error

    msg = body.get("message")
    if isinstance(msg, str):
        return msg

    return None


def parse_retry_after(headers: dict[str, str]) -> float | None:
    """Read a retry hint from lower-cased response headers.

    Checks ``retry-after-ms`` first, then ``retry-after`` as either
    delta-seconds or an HTTP-date.

    Returns:
        Seconds to wait, or None when no usable hint is present
    """
    value = headers.get("retry-after-ms")
    if value:
        with contextlib.suppress(ValueError):
            return max(float(value) / 1000.0, 0.0)

    value = headers.get("retry-after")
    if not value:
        return None

    with contextlib.suppress(ValueError):
        return max(float(value), 0.0)

    with contextlib.suppress(TypeError, ValueError, IndexError, OverflowError):
        when = parsedate_to_datetime(value)
        return max(when.timestamp() - time.time(), 0.0)

    return None
