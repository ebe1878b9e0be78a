"""
GraphQL queries and mutations for Shopify Admin API.

Organized by domain; only order edit operations are needed by the relay.
"""

from .order_edit import (
    GET_ORDER_SHIPPING_LINES_QUERY,
    ORDER_EDIT_ADD_SHIPPING_LINE_MUTATION,
    ORDER_EDIT_BEGIN_MUTATION,
    ORDER_EDIT_COMMIT_MUTATION,
    ORDER_EDIT_REMOVE_SHIPPING_LINE_MUTATION,
)

__all__ = [
    "GET_ORDER_SHIPPING_LINES_QUERY",
    "ORDER_EDIT_BEGIN_MUTATION",
    "ORDER_EDIT_ADD_SHIPPING_LINE_MUTATION",
    "ORDER_EDIT_REMOVE_SHIPPING_LINE_MUTATION",
    "ORDER_EDIT_COMMIT_MUTATION",
]
