"""
Version information for Flow Shipping Relay.

Single source of truth: pyproject.toml
Runtime access via importlib.metadata with fallback.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# Fallback version if package metadata unavailable (dev mode)
_FALLBACK_VERSION = "1.0.0"


def get_version() -> str:
    """Get the package version from metadata or fallback."""
    try:
        return version("flow-shipping-relay")
    except PackageNotFoundError:
        return _FALLBACK_VERSION


VERSION = get_version()
