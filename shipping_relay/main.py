"""
Flow Shipping Relay - FastAPI Application Entry Point

Relay HTTP entre Shopify Flow y la Admin API de Shopify que normaliza la línea
de envío de los pedidos (reemplazo o alta) para que el 3PL la mapee por título.
Atiende varias tiendas, una por región (UK, EU, US), con credenciales propias.

Este archivo actúa como el punto de entrada principal de la aplicación,
orquestando todos los componentes de manera modular.
"""

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI

from shipping_relay.core.config import Settings, get_settings
from shipping_relay.core.exception_handlers import configure_exception_handlers
from shipping_relay.core.lifespan import lifespan
from shipping_relay.core.middleware import configure_all_middleware
from shipping_relay.core.routers import configure_all_routers
from shipping_relay.db.shopify_clients import CommerceGateway
from shipping_relay.services.regions import build_region_registry
from shipping_relay.services.shipping_lines.interfaces import ICommerceGateway
from shipping_relay.services.shipping_lines.orchestrator import create_orchestrator
from shipping_relay.services.shipping_lines.validators import RequestValidator

logger = logging.getLogger(__name__)


def create_gateway(settings: Settings) -> CommerceGateway:
    """Crea el gateway de Shopify con la versión de API y el timeout configurados."""
    return CommerceGateway(
        api_version=settings.SHOPIFY_API_VERSION,
        timeout_seconds=settings.fetch_timeout_seconds,
        user_agent=f"{settings.APP_NAME.replace(' ', '-')}/{settings.APP_VERSION}",
    )


def create_application(
    settings: Optional[Settings] = None,
    gateway: Optional[ICommerceGateway] = None,
) -> FastAPI:
    """
    Factory para crear y configurar la aplicación FastAPI.

    Las dependencias de los endpoints (registro de regiones, validador,
    orquestador y gateway) se construyen una sola vez y quedan en app.state.

    Args:
        settings: Configuración (por defecto la global)
        gateway: Gateway de Shopify (por defecto CommerceGateway con aiohttp)

    Returns:
        FastAPI: Instancia configurada de la aplicación
    """
    settings = settings or get_settings()
    logger.info("🏗️ Creando aplicación FastAPI...")

    app = FastAPI(
        title=settings.APP_NAME,
        description="Relay de Shopify Flow para normalizar la línea de envío de los pedidos",
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
    )

    # Dependencias compartidas por todas las requests
    registry = build_region_registry(settings)
    gateway = gateway or create_gateway(settings)

    app.state.settings = settings
    app.state.region_registry = registry
    app.state.gateway = gateway
    app.state.request_validator = RequestValidator(registry)
    app.state.orchestrator = create_orchestrator(gateway, settings)

    # 1. Middleware (orden inverso de ejecución)
    configure_all_middleware(app, settings)

    # 2. Manejadores de excepciones
    configure_exception_handlers(app)

    # 3. Routers y endpoints
    configure_all_routers(app)

    logger.info(f"✅ Aplicación FastAPI creada - Tiendas: {registry.domains()}")
    return app


# Crear instancia de la aplicación
# Esta será la instancia principal que usa el servidor ASGI
app = create_application()


if __name__ == "__main__":
    """
    Ejecutar la aplicación directamente para desarrollo.

    Para producción se recomienda usar:
    uvicorn shipping_relay.main:app --host 0.0.0.0 --port 8080
    """
    settings = get_settings()
    logger.info("🚀 Iniciando aplicación desde main.py...")

    uvicorn_config = {
        "app": "shipping_relay.main:app",
        "host": settings.HOST,
        "port": settings.PORT,
        "reload": settings.DEBUG,
        "log_level": settings.LOG_LEVEL.lower(),
        "access_log": True,
    }

    logger.info(f"🔧 Configuración Uvicorn: {uvicorn_config}")

    try:
        uvicorn.run(**uvicorn_config)
    except KeyboardInterrupt:
        logger.info("🛑 Aplicación detenida por el usuario")
