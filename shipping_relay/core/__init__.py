"""
Núcleo de la aplicación: configuración, logging, middleware y ciclo de vida.
"""
