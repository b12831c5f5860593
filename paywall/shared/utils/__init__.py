# -*- coding: utf-8 -*-
"""
paywall/shared/utils/__init__.py

Exportación de utilidades comunes.

Autor: Equipo Paywall
Fecha: 2026-02-03
"""

from .datetime_helpers import utcnow, from_iso8601, ensure_utc, to_iso8601
from .money import round_half_up, format_money

__all__ = [
    "utcnow",
    "from_iso8601",
    "ensure_utc",
    "to_iso8601",
    "round_half_up",
    "format_money",
]
