"""
Configuración centralizada de la aplicación.

Este módulo maneja todas las variables de entorno y configuraciones
de la aplicación usando Pydantic Settings para validación automática.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

from shipping_relay.version import VERSION

DEFAULT_FETCH_TIMEOUT_MS = 10000

# Regiones soportadas: cada una lee SHOP_DOMAIN_<CODE>, SHOPIFY_ADMIN_TOKEN_<CODE> y FLOW_SECRET_<CODE>
REGION_CODES = ("UK", "EU", "US")


class Settings(BaseSettings):
    """
    Configuración de la aplicación usando Pydantic Settings.

    Todas las configuraciones se cargan desde variables de entorno
    con valores por defecto apropiados para desarrollo.
    """

    # === CONFIGURACIÓN BÁSICA DE LA APP ===
    APP_NAME: str = "Flow Shipping Relay"
    APP_VERSION: str = VERSION
    ENVIRONMENT: str = Field(default="development", validation_alias=AliasChoices("ENVIRONMENT", "ENV"))
    DEBUG: bool = Field(default=False, env="DEBUG")

    # === CONFIGURACIÓN DEL SERVIDOR ===
    HOST: str = Field(default="0.0.0.0", env="HOST")
    PORT: int = Field(default=8080, env="PORT")
    LOG_LEVEL: str = Field(default="INFO", env="LOG_LEVEL")

    # === CONFIGURACIÓN DE LOGGING ===
    LOG_FILE_PATH: Optional[str] = Field(default=None, env="LOG_FILE_PATH")
    LOG_MAX_SIZE_MB: int = Field(default=10, env="LOG_MAX_SIZE_MB")
    LOG_BACKUP_COUNT: int = Field(default=5, env="LOG_BACKUP_COUNT")
    LOG_JSON: bool = Field(default=False, env="LOG_JSON")

    # === CONFIGURACIÓN DE TIENDAS (una por región) ===
    SHOP_DOMAIN_UK: Optional[str] = Field(default=None, env="SHOP_DOMAIN_UK")
    SHOP_DOMAIN_EU: Optional[str] = Field(default=None, env="SHOP_DOMAIN_EU")
    SHOP_DOMAIN_US: Optional[str] = Field(default=None, env="SHOP_DOMAIN_US")
    SHOPIFY_ADMIN_TOKEN_UK: Optional[str] = Field(default=None, env="SHOPIFY_ADMIN_TOKEN_UK")
    SHOPIFY_ADMIN_TOKEN_EU: Optional[str] = Field(default=None, env="SHOPIFY_ADMIN_TOKEN_EU")
    SHOPIFY_ADMIN_TOKEN_US: Optional[str] = Field(default=None, env="SHOPIFY_ADMIN_TOKEN_US")
    FLOW_SECRET_UK: Optional[str] = Field(default=None, env="FLOW_SECRET_UK")
    FLOW_SECRET_EU: Optional[str] = Field(default=None, env="FLOW_SECRET_EU")
    FLOW_SECRET_US: Optional[str] = Field(default=None, env="FLOW_SECRET_US")

    # === CONFIGURACIÓN DE SHOPIFY ===
    SHOPIFY_API_VERSION: str = Field(default="2025-07", env="SHOPIFY_API_VERSION")
    FETCH_TIMEOUT_MS: int = Field(default=DEFAULT_FETCH_TIMEOUT_MS, env="FETCH_TIMEOUT_MS")

    # === CONFIGURACIÓN DEL FLUJO DE EDICIÓN ===
    ALLOW_ADD_MODE: bool = Field(default=True, env="ALLOW_ADD_MODE")
    STAFF_NOTE: str = Field(default="Normalized shipping line via Flow", env="STAFF_NOTE")
    MAX_BODY_BYTES: int = Field(default=200 * 1024, env="MAX_BODY_BYTES")

    # === CONFIGURACIÓN DE ERRORES ===
    # Incluye "details" en las respuestas de error (nunca activar en producción)
    DEBUG_ERRORS: bool = Field(default=False, env="DEBUG_ERRORS")

    # === CONFIGURACIÓN DE SEGURIDAD ===
    ALLOWED_HOSTS: Optional[List[str]] = Field(default=None, env="ALLOWED_HOSTS")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "allow",
    }

    @field_validator("ALLOWED_HOSTS", mode="before")
    @classmethod
    def parse_allowed_hosts(cls, v):
        """Parsea ALLOWED_HOSTS como lista separada por comas."""
        if isinstance(v, str):
            return [host.strip() for host in v.split(",") if host.strip()]
        return v

    @field_validator(
        "SHOP_DOMAIN_UK",
        "SHOP_DOMAIN_EU",
        "SHOP_DOMAIN_US",
        "SHOPIFY_ADMIN_TOKEN_UK",
        "SHOPIFY_ADMIN_TOKEN_EU",
        "SHOPIFY_ADMIN_TOKEN_US",
        "FLOW_SECRET_UK",
        "FLOW_SECRET_EU",
        "FLOW_SECRET_US",
        mode="before",
    )
    @classmethod
    def empty_as_none(cls, v):
        """Las variables vacías se tratan como no configuradas."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("FETCH_TIMEOUT_MS", mode="before")
    @classmethod
    def parse_fetch_timeout(cls, v):
        """Un timeout inválido o no positivo vuelve al valor por defecto."""
        try:
            timeout = int(v)
        except (TypeError, ValueError):
            return DEFAULT_FETCH_TIMEOUT_MS
        return timeout if timeout > 0 else DEFAULT_FETCH_TIMEOUT_MS

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Valida que el nivel de log sea válido."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL debe ser uno de: {valid_levels}")
        return v.upper()

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Valida que el entorno sea válido."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT debe ser uno de: {valid_envs}")
        return v.lower()

    @field_validator("PORT")
    @classmethod
    def validate_port(cls, v):
        """Valida que el puerto esté en rango válido."""
        if not 1 <= v <= 65535:
            raise ValueError("PORT debe estar entre 1 y 65535")
        return v

    @property
    def fetch_timeout_seconds(self) -> float:
        """Timeout por llamada a Shopify en segundos."""
        return self.FETCH_TIMEOUT_MS / 1000

    def region_candidates(self) -> List[dict]:
        """
        Lista de regiones candidatas tal como vienen del entorno.

        Returns:
            List[dict]: Una entrada por código de región (puede no tener dominio)
        """
        return [
            {
                "code": code,
                "shop_domain": getattr(self, f"SHOP_DOMAIN_{code}"),
                "admin_token": getattr(self, f"SHOPIFY_ADMIN_TOKEN_{code}"),
                "flow_secret": getattr(self, f"FLOW_SECRET_{code}"),
            }
            for code in REGION_CODES
        ]


@lru_cache()
def get_settings() -> Settings:
    """
    Obtiene instancia singleton de configuración.

    Returns:
        Settings: Instancia de configuración
    """
    return Settings()


def reload_settings() -> Settings:
    """
    Recarga la configuración (útil para testing).

    Returns:
        Settings: Nueva instancia de configuración
    """
    get_settings.cache_clear()
    return get_settings()
