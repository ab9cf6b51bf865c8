"""
Transport layer - HTTP exchange and API key resolution.
"""

from anthropic_messages.transport.auth import (
    API_KEY_ENV,
    get_auth_header,
    resolve_api_key,
    store_api_key,
)
from anthropic_messages.transport.http import HttpTransport

__all__ = [
    "API_KEY_ENV",
    "HttpTransport",
    "get_auth_header",
    "resolve_api_key",
    "store_api_key",
]
