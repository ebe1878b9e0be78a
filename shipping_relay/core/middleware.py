"""
Configuración de Middleware para la aplicación FastAPI.

Este módulo centraliza la configuración de middleware:
- TrustedHost (solo si ALLOWED_HOSTS está definido)
- Request logging con request ID
- Security headers
"""

import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.trustedhost import TrustedHostMiddleware

from shipping_relay.core.config import Settings
from shipping_relay.core.logging_config import request_id_var

logger = logging.getLogger(__name__)


def configure_trusted_host_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Configura middleware TrustedHost para validar hosts permitidos.

    Args:
        app: Instancia de FastAPI
        settings: Configuración de la aplicación
    """
    if settings.ALLOWED_HOSTS:
        allowed_hosts = settings.ALLOWED_HOSTS + ["localhost", "127.0.0.1"]
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)
        logger.info(f"✅ TrustedHost configurado - Hosts permitidos: {allowed_hosts}")


def configure_request_logging_middleware(app: FastAPI) -> None:
    """
    Configura middleware para logging de todas las requests/responses.

    Args:
        app: Instancia de FastAPI
    """

    @app.middleware("http")
    async def log_requests_middleware(request: Request, call_next):
        """
        Middleware que loggea información de cada request/response.

        Args:
            request: Request de FastAPI
            call_next: Siguiente middleware en la cadena

        Returns:
            Response con headers adicionales
        """
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        token = request_id_var.set(request_id)

        start_time = time.time()
        client_ip = get_client_ip(request)

        logger.info(f"📨 [{request_id}] {request.method} {request.url.path} - Client: {client_ip}")

        try:
            response = await call_next(request)

            process_time = time.time() - start_time
            status_emoji = get_status_emoji(response.status_code)
            logger.info(
                f"{status_emoji} [{request_id}] {request.method} {request.url.path} - "
                f"Status: {response.status_code} - "
                f"Time: {process_time:.3f}s"
            )

            response.headers["X-Process-Time"] = f"{process_time:.3f}"
            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"❌ [{request_id}] {request.method} {request.url.path} - Error: {str(e)} - Time: {process_time:.3f}s"
            )
            raise

        finally:
            request_id_var.reset(token)


def configure_security_headers_middleware(app: FastAPI) -> None:
    """
    Configura middleware para agregar headers de seguridad.

    Args:
        app: Instancia de FastAPI
    """

    @app.middleware("http")
    async def security_headers_middleware(request: Request, call_next):
        response = await call_next(request)

        security_headers = {
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "Referrer-Policy": "no-referrer",
        }
        for header, value in security_headers.items():
            response.headers[header] = value

        return response


def configure_all_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Configura todos los middlewares de la aplicación.
    El orden importa: se ejecutan en orden inverso al que se agregan.

    Args:
        app: Instancia de FastAPI
        settings: Configuración de la aplicación
    """
    logger.info("🔧 Configurando middlewares...")

    # 1. Security headers
    configure_security_headers_middleware(app)

    # 2. Request logging
    configure_request_logging_middleware(app)

    # 3. TrustedHost (si está configurado)
    configure_trusted_host_middleware(app, settings)

    logger.info("✅ Todos los middlewares configurados correctamente")


# Funciones auxiliares


def generate_request_id() -> str:
    """
    Genera un ID único para cada request.

    Returns:
        str: ID único de 8 caracteres
    """
    return str(uuid.uuid4())[:8]


def get_client_ip(request: Request) -> str:
    """
    Obtiene la IP real del cliente considerando proxies.

    Args:
        request: Request de FastAPI

    Returns:
        str: IP del cliente
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # Tomar la primera IP en caso de múltiples proxies
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return "unknown"


def get_status_emoji(status_code: int) -> str:
    """
    Obtiene emoji apropiado según el código de estado HTTP.
    """
    if 200 <= status_code < 300:
        return "✅"
    elif 300 <= status_code < 400:
        return "↩️"
    elif 400 <= status_code < 500:
        return "⚠️"
    elif 500 <= status_code < 600:
        return "❌"
    else:
        return "📤"
