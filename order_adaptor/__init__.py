"""
Order Adaptor Service - Integration layer for the commerce order API.

This package forwards storefront order and checkout operations to the
upstream commerce API, translating payloads between the two shapes and
normalizing upstream failures into typed errors.
"""

__version__ = "0.1.0"
