"""
RegionRegistry - static mapping storefront domain -> Region.

Built once at startup from configuration and passed explicitly to the
validator and the endpoints; never mutated afterwards.
"""

import logging
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping

from shipping_relay.core.config import Settings
from shipping_relay.domain.models import Region

logger = logging.getLogger(__name__)


class RegionRegistry:
    """
    Read-only registry of configured regions keyed by shop domain.

    Lookup is an exact, case-sensitive match on the domain string.
    """

    def __init__(self, regions: Iterable[Region]):
        """
        Initialize the registry.

        Args:
            regions: Candidate regions; entries without a shop domain are dropped
                     and only the first region of a given domain is kept.
        """
        by_domain: dict[str, Region] = {}
        for region in regions:
            if not region.shop_domain:
                logger.debug(f"Region {region.code} has no shop domain, skipping")
                continue
            if region.shop_domain in by_domain:
                logger.warning(
                    f"⚠️ Duplicate shop domain {region.shop_domain} for region {region.code}, "
                    f"keeping {by_domain[region.shop_domain].code}"
                )
                continue
            by_domain[region.shop_domain] = region

        self._by_domain: Mapping[str, Region] = MappingProxyType(by_domain)

    def lookup(self, domain: str) -> Region | None:
        """Return the region configured for the domain, or None."""
        return self._by_domain.get(domain)

    def domains(self) -> list[str]:
        """Configured shop domains, in configuration order."""
        return list(self._by_domain)

    def configured_tokens(self) -> dict[str, bool]:
        """Region code -> whether an Admin API token is configured."""
        return {region.code: region.has_token for region in self._by_domain.values()}

    def __contains__(self, domain: object) -> bool:
        return domain in self._by_domain

    def __iter__(self) -> Iterator[Region]:
        return iter(self._by_domain.values())

    def __len__(self) -> int:
        return len(self._by_domain)

    def __repr__(self) -> str:
        return f"RegionRegistry(shops={self.domains()})"


def _region_from_candidate(candidate: Mapping[str, Any]) -> Region:
    return Region(
        code=candidate["code"],
        shop_domain=candidate.get("shop_domain") or "",
        admin_token=candidate.get("admin_token"),
        flow_secret=candidate.get("flow_secret"),
    )


def build_region_registry(settings: Settings) -> RegionRegistry:
    """
    Build the registry from the SHOP_DOMAIN_* / SHOPIFY_ADMIN_TOKEN_* / FLOW_SECRET_* settings.

    Args:
        settings: Application settings

    Returns:
        RegionRegistry: Registry with every region that has a shop domain
    """
    registry = RegionRegistry(_region_from_candidate(c) for c in settings.region_candidates())

    if not len(registry):
        logger.warning("⚠️ No shop domains configured (SHOP_DOMAIN_UK/EU/US), every request will be rejected")
    else:
        logger.info(f"✅ Region registry built - Shops: {registry.domains()}")

    return registry
