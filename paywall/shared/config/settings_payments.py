# -*- coding: utf-8 -*-
"""
paywall/shared/config/settings_payments.py

Configuración de pagos, comisiones, entitlements e idempotencia.

Descripción:
    Centraliza el reparto marketplace (comisión de plataforma y estimado
    de procesador), credenciales de Square, tiempos de espera del gateway
    y retención de claves de idempotencia.

Autor: Equipo Paywall
Fecha: 2026-02-03
"""

from __future__ import annotations

import os
from decimal import Decimal
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PaymentsSettings(BaseSettings):
    """Configuración del motor de compras."""

    # =========================================================================
    # REPARTO MARKETPLACE
    # =========================================================================

    platform_fee_percent: Decimal = Field(
        default=Decimal("10"),
        description="Comisión de plataforma (porcentaje del bruto)",
    )

    processor_fee_percent: Decimal = Field(
        default=Decimal("2.9"),
        description="Porcentaje del estimado de comisión del procesador (fallback)",
    )

    processor_fee_fixed_cents: int = Field(
        default=30,
        description="Parte fija del estimado de comisión del procesador (centavos)",
    )

    default_currency: str = Field(
        default="USD",
        description="Moneda por defecto (ISO 4217)",
    )

    # =========================================================================
    # ENTITLEMENTS
    # =========================================================================

    entitlement_default_hours: int = Field(
        default=24,
        description="Vigencia del token cuando el juego no tiene hora de fin",
    )

    # =========================================================================
    # IDEMPOTENCIA
    # =========================================================================

    idempotency_ttl_seconds: int = Field(
        default=86_400,
        description="Retención de claves de idempotencia (24h)",
    )

    # =========================================================================
    # SQUARE
    # =========================================================================

    square_access_token: Optional[str] = Field(
        default=None,
        description="Token de acceso de Square (sandbox o producción)",
    )

    square_location_id: Optional[str] = Field(
        default=None,
        description="Location ID de Square para los cobros",
    )

    square_environment: Literal["sandbox", "production"] = Field(
        default="sandbox",
        description="Entorno de Square",
    )

    square_webhook_signature_key: Optional[str] = Field(
        default=None,
        description="Clave de firma de webhooks de Square",
    )

    square_webhook_notification_url: Optional[str] = Field(
        default=None,
        description="URL pública registrada en Square (parte del mensaje firmado)",
    )

    gateway_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout por llamada al gateway de pagos",
    )

    gateway_max_retries: int = Field(
        default=2,
        description="Reintentos acotados ante errores transitorios del gateway",
    )

    # =========================================================================
    # SEGURIDAD / CHECKOUT
    # =========================================================================

    allow_insecure_webhooks: bool = Field(
        default=False,
        description="Permite webhooks sin validación de firma (SOLO DESARROLLO)",
    )

    checkout_return_path: str = Field(
        default="/checkout/{purchase_id}/success",
        description="Plantilla de ruta del frontend a la que regresa el checkout",
    )

    @field_validator("square_access_token", mode="before")
    @classmethod
    def _load_square_access_token(cls, v: Optional[str]) -> Optional[str]:
        """Fallback a SQUARE_ACCESS_TOKEN si no viene en settings."""
        if v:
            return v
        return os.getenv("SQUARE_ACCESS_TOKEN")

    @field_validator("platform_fee_percent")
    @classmethod
    def _check_platform_fee(cls, v: Decimal) -> Decimal:
        if v < 0 or v > 100:
            raise ValueError("platform_fee_percent debe estar entre 0 y 100")
        return v

    @property
    def square_base_url(self) -> str:
        if self.square_environment == "production":
            return "https://connect.squareup.com"
        return "https://connect.squareupsandbox.com"

    # =========================================================================
    # CONFIGURACIÓN DE PYDANTIC
    # =========================================================================

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_payments_settings() -> PaymentsSettings:
    """
    Obtiene la configuración de pagos (cacheada por proceso).

    Returns:
        PaymentsSettings: Configuración de pagos
    """
    return PaymentsSettings()


__all__ = [
    "PaymentsSettings",
    "get_payments_settings",
]
# Fin del archivo paywall/shared/config/settings_payments.py
