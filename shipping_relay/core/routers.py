"""
Configuración centralizada de routers para la aplicación FastAPI.

Este módulo registra el health check y el router de Shopify Flow.
"""

import logging

from fastapi import FastAPI, Request

from shipping_relay.api.v1.endpoints.flow import router as flow_router
from shipping_relay.api.v1.schemas import HealthResponse

logger = logging.getLogger(__name__)


def create_health_endpoints(app: FastAPI) -> None:
    """
    Crea el endpoint de health check.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/health", tags=["Health"], summary="Health Check", response_model=HealthResponse)
    async def health_check(request: Request):
        """
        Lista las tiendas configuradas y si cada una tiene token.

        No llama a Shopify ni expone tokens o secretos.
        """
        registry = request.app.state.region_registry
        settings = request.app.state.settings
        return {
            "ok": True,
            "shops": registry.domains(),
            "shopifyConfigured": registry.configured_tokens(),
            "apiVersion": settings.SHOPIFY_API_VERSION,
        }


def configure_flow_routers(app: FastAPI) -> None:
    """
    Configura el router de Shopify Flow.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando router de Shopify Flow...")

    app.include_router(
        flow_router,
        prefix="/flow",
        tags=["Shopify Flow"],
    )
    logger.info("✅ Router de Shopify Flow configurado")


def configure_all_routers(app: FastAPI) -> None:
    """
    Configura todos los routers y endpoints de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando todos los routers...")

    create_health_endpoints(app)
    configure_flow_routers(app)

    logger.info("✅ Todos los routers configurados correctamente")
