"""
RequestValidator service for validating Flow requests before any Shopify call.

Every check is a pure function: it returns the normalized value or raises a
ValidationException carrying the HTTP status and message for the caller.
"""

import hmac
import logging
import re
from typing import Any, Mapping

from shipping_relay.domain.models import EditRequest, Region
from shipping_relay.services.regions import RegionRegistry
from shipping_relay.utils.error_handler import UnauthorizedException, ValidationException
from shipping_relay.utils.id_utils import to_order_gid

logger = logging.getLogger(__name__)

SHOP_DOMAIN_RE = re.compile(r"^[a-z0-9-]+\.myshopify\.com$")

_FALSE_STRINGS = frozenset({"", "false", "0", "no", "off"})


def validate_domain(raw: Any) -> str:
    """
    Validate the storefront domain shape.

    Raises:
        ValidationException: 400 if not a string matching SHOP_DOMAIN_RE exactly
    """
    # fullmatch: "$" alone would accept a trailing newline
    if not isinstance(raw, str) or not SHOP_DOMAIN_RE.fullmatch(raw):
        raise ValidationException("Missing/invalid shopDomain", field="shopDomain", invalid_value=raw)
    return raw


def resolve_region(registry: RegionRegistry, domain: str) -> Region:
    """
    Resolve the region configured for the domain.

    Raises:
        ValidationException: 400 if the shop is not configured
    """
    region = registry.lookup(domain)
    if region is None:
        raise ValidationException(f"Shop not recognized: {domain}", field="shopDomain")
    return region


def _secret_bytes(value: Any) -> bytes:
    if value is None:
        return b""
    return str(value).encode("utf-8")


def check_secret(region: Region, provided: Any) -> None:
    """
    Verify X-Flow-Secret when the region has a shared secret configured.

    The comparison is constant time over the UTF-8 bytes of both values;
    an absent or empty header is compared as b"".

    Raises:
        UnauthorizedException: 401 if the header does not match
    """
    if not region.requires_secret:
        return

    if not hmac.compare_digest(_secret_bytes(provided), _secret_bytes(region.flow_secret)):
        logger.warning(f"🚫 Bad X-Flow-Secret for shop {region.shop_domain}")
        raise UnauthorizedException()


def canonicalize_order_ref(order_gid: Any, order_id: Any) -> str:
    """
    Resolve the canonical order global ID.

    orderGid is tried first, then the numeric fallback orderId. Each candidate is
    accepted when it already has the gid://shopify/Order/ prefix or is all digits.

    Raises:
        ValidationException: 400 if neither candidate is usable
    """
    gid = to_order_gid(order_gid) or to_order_gid(order_id)
    if not gid:
        raise ValidationException(
            "Missing/invalid orderGid/orderId",
            field="orderGid",
            invalid_value=order_gid if order_gid is not None else order_id,
        )
    return gid


def require_title(raw: Any) -> str:
    """
    Require a target shipping title that is non-empty after trimming.

    The title is returned as provided (not trimmed).

    Raises:
        ValidationException: 400 if missing or blank
    """
    if raw is None or isinstance(raw, (dict, list, bool)):
        raise ValidationException("Missing targetShippingTitle", field="targetShippingTitle")

    title = raw if isinstance(raw, str) else str(raw)
    if not title.strip():
        raise ValidationException("Missing targetShippingTitle", field="targetShippingTitle")
    return title


def parse_dry_run(raw: Any) -> bool:
    """
    Interpret the dryRun flag.

    Only explicit false values disable it: None, False, 0 and the strings
    "", "false", "0", "no" and "off". Anything else is a preview.
    """
    if raw is None or isinstance(raw, bool):
        return bool(raw)
    if isinstance(raw, str):
        return raw.strip().lower() not in _FALSE_STRINGS
    if isinstance(raw, (int, float)):
        return raw != 0
    return True


class RequestValidator:
    """
    Validates an inbound Flow request against the region registry.

    Responsibilities:
    - Validate the storefront domain shape
    - Resolve the region
    - Verify the optional shared secret
    - Canonicalize the order identifier
    - Require the target shipping title
    """

    def __init__(self, registry: RegionRegistry):
        """
        Initialize validator.

        Args:
            registry: Immutable region registry built at startup
        """
        self.registry = registry

    def validate(self, body: Mapping[str, Any], secret_header: str | None) -> tuple[Region, EditRequest]:
        """
        Validate the request body and headers.

        Checks run in order: domain, region, secret, order reference, title.

        Args:
            body: Parsed JSON body
            secret_header: Value of the X-Flow-Secret header (may be None)

        Returns:
            tuple: Resolved region and validated edit request

        Raises:
            ValidationException: On the first failing check
        """
        domain = validate_domain(body.get("shopDomain"))
        region = resolve_region(self.registry, domain)
        check_secret(region, secret_header)
        order_gid = canonicalize_order_ref(body.get("orderGid"), body.get("orderId"))
        title = require_title(body.get("targetShippingTitle"))

        request = EditRequest(
            shop_domain=domain,
            order_gid=order_gid,
            target_title=title,
            target_price=body.get("targetShippingPrice"),
            dry_run=parse_dry_run(body.get("dryRun", False)),
        )

        logger.debug(f"Request validated for {domain}: order={order_gid} dry_run={request.dry_run}")
        return region, request
