"""
Shopify GraphQL clients.

The relay talks to several shops (one per region) through a single gateway
that picks the Admin token of the resolved region on every call.
"""

from .gateway import CommerceGateway

__all__ = ["CommerceGateway"]
