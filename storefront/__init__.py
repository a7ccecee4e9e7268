"""
Storefront cache and cart subsystem.

Two-tier (memory + durable) cache with per-key TTL, a shopping cart built
on it, read-through access to the hosted storefront backend and bindings for
the UI layer.
"""

from .constants import APP_VERSION as __version__
from .container import StorefrontContainer, create_container

__all__ = ["StorefrontContainer", "create_container", "__version__"]
