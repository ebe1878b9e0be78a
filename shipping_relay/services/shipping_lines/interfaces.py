"""
Interfaces/Protocols for shipping line services (Dependency Inversion Principle).

These protocols define contracts that services must implement,
allowing for loose coupling and easy testing.
"""

from typing import Any, Protocol

from shipping_relay.domain.models import Region


class ICommerceGateway(Protocol):
    """Protocol for the authenticated Shopify GraphQL call."""

    async def call(self, region: Region, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute a GraphQL document for the region, return the "data" member."""
        ...
