"""
Storefront Global Constants

Centralized location for the cache namespace, TTL classes and resource keys
shared across the storefront cache and cart subsystem.
"""

import time

# Durable store namespace owned by the cache
CACHE_NAMESPACE = "cache:"

_SECOND_MS = 1000
_MINUTE_MS = 60 * _SECOND_MS
_HOUR_MS = 60 * _MINUTE_MS
_DAY_MS = 24 * _HOUR_MS


class CacheTTL:
    """TTL classes in milliseconds."""

    STATIC = 30 * _DAY_MS  # categories, site settings, wilayas, about-us
    MEDIUM = 1 * _HOUR_MS
    SHORT = 5 * _MINUTE_MS  # products, prices
    VERY_SHORT = 1 * _MINUTE_MS
    CART = 30 * _DAY_MS
    SESSION = 24 * _HOUR_MS

    # Upper bound accepted by configuration validation
    MAX = 365 * _DAY_MS


class CacheKeys:
    """Stable cache keys for storefront resources."""

    PRODUCTS = "all_products"
    CATEGORIES = "site_categories"
    WILAYAS = "wilayas_list"
    SITE_SETTINGS = "site_settings"
    ABOUT_US = "about_us_content"
    CART = "app:cart"
    USER_PREFERENCES = "user_preferences"
    USER_HISTORY = "user_history"

    @staticmethod
    def product_detail(product_id: str) -> str:
        return f"product_{product_id}"

    @staticmethod
    def municipalities(wilaya_id: str) -> str:
        return f"municipalities_{wilaya_id}"


DEFAULT_TTL_MS = CacheTTL.SHORT


# Timestamp Functions
def now_ms() -> int:
    """Current wall-clock time as integer epoch milliseconds.

    Cache envelopes persist this value, so it must stay comparable across
    processes that share a durable store.
    """
    return int(time.time() * 1000)


# Application Constants
APP_VERSION = "1.0.0"
