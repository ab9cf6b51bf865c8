"""
Resilience layer - retry with exponential backoff and jitter.
"""

from anthropic_messages.resilience.retry import (
    JitterStrategy,
    RetryConfig,
    RetryPolicy,
    RetryResult,
)

__all__ = [
    "JitterStrategy",
    "RetryConfig",
    "RetryPolicy",
    "RetryResult",
]
