"""
Shipping line services for Shopify Flow order normalization.

This package contains the request validation and the order edit
orchestration that replaces or adds the shipping line of an order.
"""
