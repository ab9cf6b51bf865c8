"""
API key resolution utilities.

Resolves API keys from multiple sources:
1. Explicit value
2. Environment variable (ANTHROPIC_API_KEY)
3. System keyring (optional)
"""

from __future__ import annotations

import os

from anthropic_messages._features import HAS_KEYRING, require_extra

API_KEY_ENV = "ANTHROPIC_API_KEY"
KEYRING_SERVICE = "anthropic"


def resolve_api_key(explicit_key: str | None = None, env_var: str = API_KEY_ENV) -> str | None:
    """Resolve the API key.

    Args:
        explicit_key: Explicitly provided API key
        env_var: Environment variable to consult

    Returns:
        Resolved API key or None if not found
    """
    if explicit_key:
        return explicit_key

    key = os.getenv(env_var)
    if key:
        return key

    return _try_keyring()


def _try_keyring() -> str | None:
    """Try to get the API key from the system keyring."""
    if not HAS_KEYRING:
        return None

    import keyring

    try:
        return keyring.get_password(KEYRING_SERVICE, "api_key")
    except Exception:
        # Keyring backends fail in containers and headless sessions
        return None


def store_api_key(api_key: str) -> None:
    """Save an API key to the system keyring.

    Raises:
        ImportError: If the ``keyring`` extra is not installed
    """
    require_extra("keyring", "keyring")
    import keyring

    keyring.set_password(KEYRING_SERVICE, "api_key", api_key)


def get_auth_header(api_key: str) -> dict[str, str]:
    """Get the authentication header for a key."""
    return {"x-api-key": api_key}
