"""
Read-through data access for storefront resources.
"""

from .data_access import StorefrontDataService

__all__ = ["StorefrontDataService"]
