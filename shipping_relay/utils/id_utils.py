"""
ID format conversion utilities for Shopify GraphQL orders.

Shopify identifies orders in two formats:
- REST API IDs: numeric strings like "5512345678901"
- GraphQL IDs: global IDs like "gid://shopify/Order/5512345678901"
"""

import logging
import re
from typing import Any, Optional

logger = logging.getLogger(__name__)

ORDER_GID_PREFIX = "gid://shopify/Order/"

_DIGITS_RE = re.compile(r"^\d+$")


def _as_text(value: Any) -> str:
    """Stringify an identifier candidate; None, empty values and booleans become ""."""
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value
    return ""


def is_numeric_id(value: Any) -> bool:
    """True when the value is made only of decimal digits."""
    return bool(_DIGITS_RE.match(_as_text(value)))


def to_order_gid(value: Any) -> Optional[str]:
    """
    Normalize an order identifier to the GraphQL global ID.

    Args:
        value: Global ID ("gid://shopify/Order/123") or bare numeric ID ("123" or 123)

    Returns:
        The global ID, or None if the value is in neither form
    """
    text = _as_text(value)
    if not text:
        return None

    if text.startswith(ORDER_GID_PREFIX):
        return text

    if _DIGITS_RE.match(text):
        gid = f"{ORDER_GID_PREFIX}{text}"
        logger.debug(f"Converted numeric order ID '{text}' to GraphQL ID: {gid}")
        return gid

    return None


def graphql_to_rest_id(graphql_id: str) -> str:
    """
    Extract the numeric ID from a GraphQL global ID.

    Args:
        graphql_id: GraphQL global ID (e.g., "gid://shopify/Order/5512345678901")

    Returns:
        Numeric REST ID, or the input unchanged when it has no numeric suffix
    """
    if not graphql_id:
        return ""

    if graphql_id.isdigit():
        return graphql_id

    match = re.match(r"gid://shopify/\w+/(\d+)", graphql_id)
    return match.group(1) if match else graphql_id
