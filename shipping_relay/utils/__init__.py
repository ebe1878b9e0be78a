"""
Utilidades compartidas: errores e identificadores de Shopify.
"""
