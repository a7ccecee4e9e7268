"""
Storefront domain layer.
"""
