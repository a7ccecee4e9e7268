"""
Cache Domain Module

Entry envelope, value objects and repository interfaces for the
storefront cache.
"""
