"""
Manejadores de excepciones centralizados para la aplicación FastAPI.

Todas las respuestas de error tienen la forma {"error": mensaje}; el campo
"details" solo se agrega cuando DEBUG_ERRORS está activado.
"""

import logging
import traceback
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shipping_relay.core.config import get_settings
from shipping_relay.utils.error_handler import AppException, log_error

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Server error"


def _debug_enabled(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None) or get_settings()
    return settings.DEBUG_ERRORS


def error_body(message: str, details: Any = None, debug: bool = False) -> Dict[str, Any]:
    """
    Construye el cuerpo JSON de error.

    Args:
        message: Mensaje visible para el llamador
        details: Detalle adicional (valor inválido, traceback, respuesta de Shopify)
        debug: Si incluir details

    Returns:
        Dict: {"error": message} más "details" cuando corresponde
    """
    body: Dict[str, Any] = {"error": message}
    if debug and details:
        body["details"] = details if isinstance(details, str) else str(details)
    return body


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Manejador para excepciones personalizadas de la aplicación.

    Args:
        request: Request de FastAPI
        exc: Excepción personalizada de la app

    Returns:
        JSONResponse: Respuesta JSON con error formateado
    """
    level = logging.WARNING if exc.status_code < 500 else logging.ERROR
    log_error(exc, {"path": str(request.url.path)}, level=level)

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.details, _debug_enabled(request)),
    )


async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Manejador para HTTPException de Starlette (ruta inexistente, método no permitido).
    """
    logger.warning(f"HTTP Exception: {exc.status_code} - {exc.detail} - URL: {request.url}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Manejador global para excepciones no capturadas.

    Args:
        request: Request de FastAPI
        exc: Excepción no manejada

    Returns:
        JSONResponse: 500 genérico (traceback solo con DEBUG_ERRORS)
    """
    tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    logger.error(f"Unhandled Exception: {type(exc).__name__}: {exc} - URL: {request.url}\n{tb}")

    return JSONResponse(
        status_code=500,
        content=error_body(GENERIC_ERROR_MESSAGE, tb, _debug_enabled(request)),
    )


def configure_exception_handlers(app: FastAPI) -> None:
    """
    Configura todos los manejadores de excepciones de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando manejadores de excepciones...")

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, starlette_http_exception_handler)

    # Manejador global (debe ser el último)
    app.add_exception_handler(Exception, global_exception_handler)

    logger.info("✅ Manejadores de excepciones configurados correctamente")
