"""
Cache and cart services.
"""

from .cache_manager import CacheManager
from .cart_manager import CartManager

__all__ = ["CacheManager", "CartManager"]
