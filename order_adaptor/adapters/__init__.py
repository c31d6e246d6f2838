"""
Adapters package for the Order Adaptor Service.

This package contains components for integrating with the commerce API:
- The HTTP client that talks to the upstream service
- Transformers between storefront and upstream order payloads
"""

from .commerce_client import CommerceAPIClient, CommerceResponse

__all__ = [
    'CommerceAPIClient',
    'CommerceResponse',
]
