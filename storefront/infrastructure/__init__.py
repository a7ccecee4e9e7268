"""
Infrastructure adapters: durable storage and the hosted backend.
"""
