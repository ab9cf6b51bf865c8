"""
Per-call lifecycle states.

Each call moves strictly forward through
``IDLE -> BUILDING -> SENDING -> (DECODING | STREAMING) -> (DONE | FAILED)``.
Transitions are logged at debug level under a short call id.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Any

from anthropic_messages.telemetry import get_logger

logger = get_logger("anthropic_messages.client")


class CallState(str, Enum):
    """Lifecycle state of one call."""

    IDLE = "idle"
    BUILDING = "building"
    SENDING = "sending"
    DECODING = "decoding"
    STREAMING = "streaming"
    DONE = "done"
    FAILED = "failed"


def new_call_id() -> str:
    return uuid.uuid4().hex[:12]


def log_transition(call_id: str, state: CallState, **fields: Any) -> None:
    logger.debug("Call state", call_id=call_id, state=state.value, **fields)
