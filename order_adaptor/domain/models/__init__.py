"""Storefront order models returned by the order operations."""
