"""
Catalog, cart and order models.
"""
