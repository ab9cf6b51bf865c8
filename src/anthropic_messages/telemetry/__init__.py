"""
Telemetry module for anthropic-messages.

Provides structured logging with API key masking.
"""

from anthropic_messages.telemetry.logger import (
    JsonFormatter,
    LogLevel,
    MessagesLogger,
    SensitiveDataMasker,
    TextFormatter,
    get_logger,
)

__all__ = [
    "JsonFormatter",
    "LogLevel",
    "MessagesLogger",
    "SensitiveDataMasker",
    "TextFormatter",
    "get_logger",
]
