# -*- coding: utf-8 -*-
"""
paywall/shared/config/settings_testing.py

Overrides para entorno de PRUEBAS (test) usando Pydantic v2.
Busca ser determinista: logging moderado y base de datos SQLite en memoria.

Autor: Equipo Paywall
Fecha: 2026-02-03
"""

from typing import Optional

from pydantic_settings import SettingsConfigDict

from .settings_base import BaseAppSettings


class EnvTestingSettings(BaseAppSettings):
    # --- Identidad de entorno ---
    python_env: str = "test"

    # --- Logging en test: menos ruido ---
    log_level: str = "WARNING"
    log_format: str = "pretty"

    # --- Base de datos aislada ---
    db_url: Optional[str] = "sqlite+aiosqlite:///:memory:"

    # --- Sin Redis: idempotencia en memoria ---
    redis_url: Optional[str] = None

    http_metrics_enabled: bool = False

    model_config = SettingsConfigDict(
        env_file=".env.test",
        env_file_encoding="utf-8",
        extra="ignore",
    )


__all__ = ["EnvTestingSettings"]
# Fin del archivo paywall/shared/config/settings_testing.py
