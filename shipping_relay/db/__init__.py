"""
Shopify data access: GraphQL documents and the authenticated gateway.
"""
