"""
Region domain model.

A region is one storefront (one Shopify shop) with its own Admin API token
and, optionally, the shared secret Shopify Flow must send in X-Flow-Secret.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Region:
    """
    Immutable storefront configuration.

    Attributes:
        code: Short identifier (UK, EU, US)
        shop_domain: Canonical myshopify.com domain, lookup key of the registry
        admin_token: Shopify Admin API access token (may be empty: not configured)
        flow_secret: Optional shared secret expected in X-Flow-Secret
    """

    code: str
    shop_domain: str
    admin_token: str | None = None
    flow_secret: str | None = None

    @property
    def has_token(self) -> bool:
        """Whether an Admin API token is configured."""
        return bool(self.admin_token)

    @property
    def requires_secret(self) -> bool:
        """Whether requests for this shop must carry X-Flow-Secret."""
        return bool(self.flow_secret)

    def __repr__(self) -> str:
        # Never print credentials
        return (
            f"Region(code='{self.code}', shop_domain='{self.shop_domain}', "
            f"has_token={self.has_token}, requires_secret={self.requires_secret})"
        )
