# -*- coding: utf-8 -*-
"""
paywall/shared/config/settings_dev.py

Overrides para entorno de DESARROLLO (dev) usando Pydantic v2.
Hereda de BaseAppSettings y ajusta únicamente valores específicos
del ambiente local de desarrollo.

Autor: Equipo Paywall
Fecha: 2026-02-03
"""

from pydantic_settings import SettingsConfigDict

from .settings_base import BaseAppSettings


class DevSettings(BaseAppSettings):
    """Configuración para entorno de desarrollo."""

    python_env: str = "development"

    # Logging legible en consola
    log_level: str = "DEBUG"
    log_format: str = "plain"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


__all__ = ["DevSettings"]

# Fin del archivo paywall/shared/config/settings_dev.py
