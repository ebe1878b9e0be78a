"""
Configuración del sistema de logging.

Este módulo configura el logging de la aplicación con:
- Handler de consola (coloreado en debug, JSON opcional)
- Handlers de archivo con rotación (opcionales)
- Contexto de request (request_id) en cada registro
- Enmascarado de tokens de Shopify y secretos de Flow
"""

import json
import logging
import logging.config
import re
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from shipping_relay.core.config import Settings, get_settings

# Request ID de la request en curso (lo fija el middleware de logging)
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Tokens de la Admin API de Shopify (shpat_, shpca_, shppa_, shpss_)
SHOPIFY_TOKEN_RE = re.compile(r"\bshp(?:at|ca|pa|ss)_[A-Za-z0-9]+")

# Atributos estándar de LogRecord que no se copian como "extra"
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "message",
        "taskName",
        "request_id",
    }
)


class ColoredFormatter(logging.Formatter):
    """
    Formatter personalizado que agrega colores a los logs en consola.
    """

    # Códigos de color ANSI
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Verde
        "WARNING": "\033[33m",  # Amarillo
        "ERROR": "\033[31m",  # Rojo
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",  # Reset
    }

    def format(self, record):
        """
        Formatea el record con colores si es para consola.

        Args:
            record: LogRecord a formatear

        Returns:
            str: Mensaje formateado con colores
        """
        formatted = super().format(record)

        # Agregar color solo si es TTY (terminal)
        if hasattr(sys.stderr, "isatty") and sys.stderr.isatty():
            color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
            reset = self.COLORS["RESET"]
            formatted = formatted.replace(record.levelname, f"{color}{record.levelname}{reset}", 1)

        return formatted


class StructuredFormatter(logging.Formatter):
    """
    Formatter para logging estructurado en JSON.
    Útil para agregadores de logs (Render, Datadog, ELK).
    """

    def format(self, record):
        """
        Formatea el record como JSON estructurado.

        Args:
            record: LogRecord a formatear

        Returns:
            str: Mensaje en formato JSON
        """
        settings = get_settings()

        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "app_name": settings.APP_NAME,
            "app_version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
        }

        request_id = getattr(record, "request_id", None)
        if request_id:
            log_entry["request_id"] = request_id

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        extra_fields = {key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS}
        if extra_fields:
            log_entry["extra"] = extra_fields

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class RequestContextFilter(logging.Filter):
    """
    Filtro que agrega el request_id de la request actual a los logs.
    """

    def filter(self, record):
        record.request_id = request_id_var.get()
        return True


class SecretMaskingFilter(logging.Filter):
    """
    Filtro que enmascara tokens de Shopify y secretos configurados en los mensajes.
    """

    def __init__(self, secrets: Iterable[Optional[str]] = ()):
        super().__init__()
        # Los más largos primero para no dejar sufijos sin enmascarar
        self.secrets = sorted({s for s in secrets if s and len(s) >= 4}, key=len, reverse=True)

    def _mask(self, text: str) -> str:
        masked = SHOPIFY_TOKEN_RE.sub("shp***", text)
        for secret in self.secrets:
            masked = masked.replace(secret, "***")
        return masked

    def filter(self, record):
        message = record.getMessage()
        masked = self._mask(message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def _configured_secrets(settings: Settings) -> list:
    secrets = []
    for candidate in settings.region_candidates():
        secrets.extend([candidate["admin_token"], candidate["flow_secret"]])
    return secrets


def get_logging_configuration(settings: Settings) -> Dict[str, Any]:
    """
    Genera configuración completa de logging.

    Args:
        settings: Configuración de la aplicación

    Returns:
        Dict: Configuración para logging.config.dictConfig
    """
    if settings.LOG_JSON:
        console_formatter = "json"
    else:
        console_formatter = "colored" if settings.DEBUG else "standard"

    config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": ("%(asctime)s - %(name)s - %(levelname)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s"),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "colored": {
                "()": ColoredFormatter,
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {"()": StructuredFormatter},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": settings.LOG_LEVEL,
                "formatter": console_formatter,
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": {
            "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
        },
        "root": {"level": settings.LOG_LEVEL, "handlers": ["console"]},
    }

    # Agregar handler de archivo si está configurado
    if settings.LOG_FILE_PATH:
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": settings.LOG_LEVEL,
            "formatter": "detailed",
            "filename": settings.LOG_FILE_PATH,
            "maxBytes": settings.LOG_MAX_SIZE_MB * 1024 * 1024,
            "backupCount": settings.LOG_BACKUP_COUNT,
            "encoding": "utf-8",
        }

        # Handler de errores separado
        error_log_path = settings.LOG_FILE_PATH.replace(".log", "_errors.log")
        config["handlers"]["error_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "ERROR",
            "formatter": "detailed",
            "filename": error_log_path,
            "maxBytes": settings.LOG_MAX_SIZE_MB * 1024 * 1024,
            "backupCount": settings.LOG_BACKUP_COUNT,
            "encoding": "utf-8",
        }

        config["root"]["handlers"].extend(["file", "error_file"])

    return config


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Configura el sistema de logging completo de la aplicación.

    Args:
        settings: Configuración (por defecto la global)
    """
    settings = settings or get_settings()

    if settings.LOG_FILE_PATH:
        Path(settings.LOG_FILE_PATH).parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(get_logging_configuration(settings))

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL))

    request_filter = RequestContextFilter()
    masking_filter = SecretMaskingFilter(_configured_secrets(settings))

    for handler in root_logger.handlers:
        handler.addFilter(request_filter)
        handler.addFilter(masking_filter)

    configure_specific_loggers(settings)

    logger = logging.getLogger(__name__)
    logger.info(f"Sistema de logging configurado - Nivel: {settings.LOG_LEVEL}")
    if settings.LOG_FILE_PATH:
        logger.info(f"Logs guardándose en: {settings.LOG_FILE_PATH}")


def configure_specific_loggers(settings: Settings) -> None:
    """
    Configura loggers específicos para diferentes módulos.
    """
    logging.getLogger("shipping_relay.api.call").setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

    # Reducir verbosidad de librerías externas
    for logger_name in ["aiohttp.access", "aiohttp.client", "asyncio", "httpx"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Obtiene un logger con el nombre dado."""
    return logging.getLogger(name)


def log_api_call(method: str, url: str, status_code: int, duration: float, **kwargs):
    """
    Logger específico para llamadas a APIs externas.

    Args:
        method: Método HTTP
        url: URL de la API
        status_code: Código de respuesta
        duration: Duración en segundos
        **kwargs: Datos adicionales
    """
    logger = get_logger("shipping_relay.api.call")

    extra_data = {
        "method": method,
        "url": url,
        "status_code": status_code,
        "duration_ms": round(duration * 1000, 2),
        **kwargs,
    }

    if 200 <= status_code < 300:
        level = logging.INFO
    elif 400 <= status_code < 500:
        level = logging.WARNING
    else:
        level = logging.ERROR

    logger.log(level, f"API call: {method} {url} -> {status_code} ({duration * 1000:.1f}ms)", extra=extra_data)
