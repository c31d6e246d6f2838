"""
Domain package for the Order Adaptor Service.

Contains the storefront-facing order models and the validated request
schemas accepted by the order operations.
"""
