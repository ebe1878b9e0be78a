"""
Gestión del ciclo de vida de la aplicación FastAPI.

Este módulo maneja los eventos de startup y shutdown de la aplicación:
logging, crash handlers a nivel de proceso y la sesión HTTP hacia Shopify.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from shipping_relay.core.crash_handlers import install_crash_handlers, uninstall_crash_handlers
from shipping_relay.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestión del ciclo de vida de la aplicación.
    Maneja eventos de startup y shutdown de manera ordenada.

    Args:
        app: Instancia de FastAPI
    """
    settings = app.state.settings
    loop = asyncio.get_running_loop()

    # === STARTUP ===
    # 1. Configurar logging
    setup_logging(settings)
    logger.info(f"🚀 Iniciando {settings.APP_NAME} v{settings.APP_VERSION}...")

    # 2. Errores fuera de requests terminan el proceso
    install_crash_handlers(loop)

    # 3. Verificar configuración de tiendas
    startup_verify_configuration(app)

    # 4. Sesión HTTP hacia Shopify
    await app.state.gateway.initialize()

    logger.info("🎉 Aplicación iniciada correctamente")

    # === YIELD (aplicación corriendo) ===
    yield

    # === SHUTDOWN ===
    logger.info(f"🛑 Cerrando {settings.APP_NAME}...")

    try:
        await app.state.gateway.close()
    finally:
        uninstall_crash_handlers(loop)

    logger.info("👋 Aplicación cerrada correctamente")


def startup_verify_configuration(app: FastAPI) -> None:
    """Registra las tiendas configuradas; una tienda sin token solo genera aviso."""
    registry = app.state.region_registry

    if not len(registry):
        logger.warning("⚠️ No hay tiendas configuradas (SHOP_DOMAIN_UK/EU/US)")
        return

    for region in registry:
        if region.has_token:
            logger.info(f"✅ Tienda {region.code}: {region.shop_domain}")
        else:
            logger.warning(f"⚠️ Tienda {region.code}: {region.shop_domain} sin SHOPIFY_ADMIN_TOKEN_{region.code}")
        if not region.requires_secret:
            logger.info(f"Tienda {region.code} sin FLOW_SECRET_{region.code}: X-Flow-Secret no se verifica")
