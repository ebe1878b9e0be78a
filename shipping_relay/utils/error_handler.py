"""
Sistema de manejo de errores personalizado.

Este módulo define todas las excepciones personalizadas de la aplicación
y proporciona utilidades para manejo consistente de errores.

Taxonomía:
- Errores de validación (4xx): culpa del llamador, se detectan antes de llamar a Shopify.
- Errores remotos (5xx): timeout/HTTP/parseo del gateway, userErrors, sesión de edición ausente,
  precio existente inválido.
- Pedido no encontrado (404).
"""

import json
import logging
import traceback
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# Longitudes máximas para evitar respuestas/logs inflados
MAX_BODY_SNIPPET = 800
MAX_ERRORS_SNIPPET = 1200


class ErrorCode(Enum):
    """
    Códigos de error estandardizados para la aplicación.
    """

    # Errores generales
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"

    # Errores de autenticación
    INVALID_FLOW_SECRET = "INVALID_FLOW_SECRET"

    # Errores de datos
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    INVALID_PRICE = "INVALID_PRICE"

    # Errores de Shopify
    SHOPIFY_API_ERROR = "SHOPIFY_API_ERROR"
    SHOPIFY_TIMEOUT = "SHOPIFY_TIMEOUT"
    SHOPIFY_USER_ERRORS = "SHOPIFY_USER_ERRORS"
    MISSING_CALCULATED_ORDER = "MISSING_CALCULATED_ORDER"


class AppException(Exception):
    """
    Excepción base para todas las excepciones personalizadas de la aplicación.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        status_code: int = 500,
        details: Any = None,
    ):
        """
        Inicializa la excepción.

        Args:
            message: Mensaje de error (visible para el llamador)
            error_code: Código de error estandardizado
            status_code: Código HTTP asociado
            details: Información adicional (solo se expone con DEBUG_ERRORS)
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details

    def __str__(self) -> str:
        """String representation del error."""
        return f"{self.error_code.value}: {self.message}"


class ValidationException(AppException):
    """
    Excepción para errores de validación de la request (400).
    """

    def __init__(self, message: str, field: Optional[str] = None, invalid_value: Any = None, **kwargs):
        """
        Inicializa la excepción de validación.

        Args:
            message: Mensaje de error
            field: Campo que falló la validación
            invalid_value: Valor que causó el error (se usa como details)
            **kwargs: Argumentos adicionales para AppException
        """
        kwargs.setdefault("error_code", ErrorCode.VALIDATION_ERROR)
        kwargs.setdefault("status_code", 400)
        super().__init__(message=message, details=invalid_value, **kwargs)
        self.field = field
        self.invalid_value = invalid_value


class UnauthorizedException(ValidationException):
    """Secreto compartido de Flow ausente o incorrecto (401)."""

    def __init__(self, message: str = "Bad X-Flow-Secret"):
        super().__init__(
            message=message,
            field="X-Flow-Secret",
            error_code=ErrorCode.INVALID_FLOW_SECRET,
            status_code=401,
        )


class PayloadTooLargeException(ValidationException):
    """Body de la request por encima del límite configurado (413)."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            message="Payload too large",
            field="body",
            invalid_value=f"{size} bytes > {limit} bytes",
            error_code=ErrorCode.PAYLOAD_TOO_LARGE,
            status_code=413,
        )


class OrderNotFoundException(AppException):
    """
    El pedido no existe en la tienda (404).
    """

    def __init__(self, order_gid: str, message: str = "Order not found"):
        super().__init__(
            message=message,
            error_code=ErrorCode.ORDER_NOT_FOUND,
            status_code=404,
            details=order_gid,
        )
        self.order_gid = order_gid


class InvalidPriceException(AppException):
    """
    Precio de envío que no se puede interpretar como número finito.

    El estado es asimétrico: 400 si el precio lo envía el llamador,
    500 si el precio inválido viene de la línea existente en Shopify.
    """

    def __init__(self, raw_value: Any, from_caller: bool):
        if from_caller:
            message, status_code = "Invalid targetShippingPrice", 400
        else:
            message, status_code = "Invalid existing shipping price", 500

        super().__init__(
            message=message,
            error_code=ErrorCode.INVALID_PRICE,
            status_code=status_code,
            details=None if raw_value is None else str(raw_value),
        )
        self.raw_value = raw_value
        self.from_caller = from_caller


class GatewayException(AppException):
    """
    Excepción para errores de la API GraphQL de Shopify (transporte, HTTP, parseo, errors).
    """

    def __init__(
        self,
        message: str,
        shop_domain: Optional[str] = None,
        api_response_code: Optional[int] = None,
        timed_out: bool = False,
    ):
        """
        Inicializa la excepción del gateway.

        Args:
            message: Mensaje de error (se trunca)
            shop_domain: Tienda contra la que se hizo la llamada
            api_response_code: Código HTTP devuelto por Shopify
            timed_out: Si la llamada se canceló por timeout
        """
        super().__init__(
            message=truncate(message, MAX_ERRORS_SNIPPET + 64),
            error_code=ErrorCode.SHOPIFY_TIMEOUT if timed_out else ErrorCode.SHOPIFY_API_ERROR,
            status_code=500,
        )
        self.shop_domain = shop_domain
        self.api_response_code = api_response_code
        self.timed_out = timed_out
        self.details = self.message


class RemoteUserErrorException(AppException):
    """
    Una mutación devolvió userErrors; el mensaje nombra el paso que falló.
    """

    def __init__(self, step: str, user_errors: List[Dict[str, Any]]):
        serialized = json.dumps(user_errors, ensure_ascii=False)
        super().__init__(
            message=f"{step} userErrors: {serialized}",
            error_code=ErrorCode.SHOPIFY_USER_ERRORS,
            status_code=500,
            details=serialized,
        )
        self.step = step
        self.user_errors = user_errors


class MissingCalculatedOrderException(AppException):
    """orderEditBegin no devolvió el id de la sesión de edición."""

    def __init__(self, order_gid: str):
        super().__init__(
            message="Missing calculatedOrderId",
            error_code=ErrorCode.MISSING_CALCULATED_ORDER,
            status_code=500,
            details=order_gid,
        )


# === FUNCIONES DE UTILIDAD ===


def truncate(text: Any, limit: int = MAX_BODY_SNIPPET) -> str:
    """
    Recorta un texto a una longitud máxima.

    Args:
        text: Texto (o valor convertible a texto)
        limit: Longitud máxima

    Returns:
        str: Texto recortado
    """
    value = "" if text is None else str(text)
    return value[:limit]


def log_error(exception: Exception, context: Optional[Dict[str, Any]] = None, level: int = logging.ERROR) -> None:
    """
    Loggea un error de manera consistente.

    Args:
        exception: Excepción a loggear
        context: Contexto adicional
        level: Nivel de logging
    """
    context = context or {}

    if isinstance(exception, AppException):
        message = f"{exception.error_code.value}: {exception.message}"
        extra = {"error_code": exception.error_code.value, "status_code": exception.status_code, **context}
    else:
        message = f"Unhandled exception: {type(exception).__name__}: {str(exception)}"
        extra = {"traceback": traceback.format_exc(), **context}

    logger.log(level, message, extra=extra)
