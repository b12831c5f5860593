# -*- coding: utf-8 -*-
"""
paywall/core/settings.py

Fachada de configuración del paywall.
Reexpone la carga de settings (Pydantic v2) definida en
`paywall.shared.config` bajo un punto de entrada estable.

Autor: Equipo Paywall
Fecha: 2026-02-03
"""

from typing import cast

from paywall.shared.config.config_loader import get_settings as _get_settings
from paywall.shared.config.settings_base import BaseAppSettings
from paywall.shared.config.settings_payments import PaymentsSettings, get_payments_settings


def get_settings() -> BaseAppSettings:
    """
    Devuelve la configuración de la aplicación (según PYTHON_ENV).

    Returns:
        BaseAppSettings: instancia cacheada por proceso.
    """
    return cast(BaseAppSettings, _get_settings())


__all__ = ["get_settings", "get_payments_settings", "BaseAppSettings", "PaymentsSettings"]

# Fin del archivo paywall/core/settings.py
