"""
Flow Shipping Relay.

Relay HTTP invocado por Shopify Flow para normalizar la línea de envío
de un pedido recién creado, de modo que los 3PL puedan mapearlo por código.
"""

from shipping_relay.version import VERSION

__version__ = VERSION
