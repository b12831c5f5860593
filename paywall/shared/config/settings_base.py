# -*- coding: utf-8 -*-
"""
paywall/shared/config/settings_base.py

Base de configuración (Pydantic v2) para el backend del paywall.
- Esta clase NO instancia singletons ni resuelve .env; eso lo hace config_loader.
- Es la base para settings_dev.py, settings_testing.py y settings_prod.py.

Autor: Equipo Paywall
Fecha: 2026-02-03
"""

from typing import Literal, Optional

from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings


# Tipos de entorno soportados
EnvName = Literal["development", "test", "production"]


class BaseAppSettings(BaseSettings):
    # =========================
    # Núcleo de la aplicación
    # =========================
    python_env: EnvName = Field(default="development", validation_alias="PYTHON_ENV")
    app_name: str = Field(default="Paywall", validation_alias="APP_NAME")
    app_version: str = Field(default="1.0.0", validation_alias="APP_VERSION")
    app_host: str = Field(default="0.0.0.0", validation_alias="APP_HOST")
    app_port: int = Field(default=8000, validation_alias="APP_PORT")
    app_url: str = Field(default="http://localhost:4300", validation_alias="APP_URL")
    debug: bool = Field(default=False, validation_alias="DEBUG")

    # =========================
    # Base de datos (PostgreSQL)
    # =========================
    db_user: str = Field(default="postgres", validation_alias="DB_USER")
    db_password: SecretStr = Field(default=SecretStr("postgres"), validation_alias="DB_PASSWORD")
    db_host: str = Field(default="localhost", validation_alias="DB_HOST")
    db_port: int = Field(default=5432, validation_alias="DB_PORT")
    db_name: str = Field(default="paywall", validation_alias="DB_NAME")
    db_pool_size: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=5, validation_alias="DB_MAX_OVERFLOW")
    db_pool_pre_ping: bool = Field(default=True, validation_alias="DB_POOL_PRE_PING")
    db_echo_sql: bool = Field(default=False, validation_alias="DB_ECHO_SQL")
    db_url: Optional[str] = Field(default=None, validation_alias="DB_URL")

    @computed_field  # type: ignore[misc]
    @property
    def database_url(self) -> str:
        """
        Genera la URL de conexión completa para SQLAlchemy async.
        Prioriza DB_URL si existe, sino construye desde componentes individuales.
        """
        from urllib.parse import quote_plus

        if self.db_url:
            url = self.db_url
            if url.startswith("sqlite"):
                return url
            return (
                url.replace("postgres://", "postgresql+asyncpg://")
                   .replace("postgresql://", "postgresql+asyncpg://")
            )

        pw = quote_plus(self.db_password.get_secret_value())
        return (
            f"postgresql+asyncpg://{self.db_user}:{pw}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    # =========================
    # Redis (almacén de idempotencia)
    # =========================
    redis_url: Optional[str] = Field(default=None, validation_alias="REDIS_URL")

    # =========================
    # Token de servicio (endpoints /admin)
    # =========================
    internal_service_token: Optional[SecretStr] = Field(default=None, validation_alias="APP_SERVICE_TOKEN")

    # =========================
    # HTTP Metrics (observabilidad)
    # =========================
    http_metrics_enabled: bool = Field(default=True, validation_alias="HTTP_METRICS_ENABLED")

    # =========================
    # CORS / Frontend
    # =========================
    allowed_origins: str = Field(default="*", validation_alias="CORS_ORIGINS")

    # =========================
    # Observabilidad / Logging
    # =========================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: Literal["json", "pretty", "plain"] = Field(default="pretty", validation_alias="LOG_FORMAT")

    # ===== Helpers de entorno =====
    @computed_field  # type: ignore[misc]
    @property
    def is_dev(self) -> bool:
        return self.python_env == "development"

    @computed_field  # type: ignore[misc]
    @property
    def is_test(self) -> bool:
        return self.python_env == "test"

    @computed_field  # type: ignore[misc]
    @property
    def is_prod(self) -> bool:
        return self.python_env == "production"

    # ===== Utilidad para normalizar CORS =====
    def get_cors_origins(self) -> list[str]:
        """Convierte allowed_origins en lista procesable para CORS middleware."""
        if not self.allowed_origins or self.allowed_origins == "*":
            return ["*"]
        return [o.strip().strip('"').strip("'") for o in self.allowed_origins.split(",") if o.strip()]

    def _security_and_payments_checks(self) -> None:
        """
        Validaciones mínimas de seguridad y coherencia.
        Se invoca desde config_loader tras instanciar el settings.
        """
        import logging
        logger = logging.getLogger(__name__)

        if self.is_prod:
            if self.app_url.startswith("http://"):
                raise ValueError("APP_URL debe usar https en producción")
            if self.get_cors_origins() == ["*"]:
                raise ValueError("CORS_ORIGINS no puede ser '*' en producción")
            if not self.redis_url:
                raise ValueError("REDIS_URL es requerido en producción (idempotencia multi-proceso)")
            if not self.internal_service_token:
                raise ValueError("APP_SERVICE_TOKEN es requerido en producción (endpoints admin)")

        if self.is_dev and not self.redis_url:
            logger.info("REDIS_URL not set: idempotency keys kept in process memory")


__all__ = ["BaseAppSettings", "EnvName"]

# Fin del archivo paywall/shared/config/settings_base.py
