"""
Runtime feature detection for optional extras.
"""

from __future__ import annotations

import importlib.util


def _check_import(module_name: str) -> bool:
    """Check if a module can be imported without importing it."""
    return importlib.util.find_spec(module_name) is not None


# Capability feature flags
HAS_KEYRING: bool = _check_import("keyring")
HAS_HTTP2: bool = _check_import("h2")


def require_extra(extra_name: str, module_name: str) -> None:
    """Raise ImportError with installation hint if an extra is not available.

    Args:
        extra_name: Name of the pip extra (e.g., 'keyring')
        module_name: Module the extra provides

    Raises:
        ImportError: With installation instructions when the module is missing
    """
    if _check_import(module_name):
        return
    raise ImportError(
        f"The '{extra_name}' extra is required for this feature. "
        f"Install it with: pip install anthropic-messages[{extra_name}]"
    )
