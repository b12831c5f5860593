# -*- coding: utf-8 -*-
"""
paywall/shared/utils/money.py

Aritmética de montos en unidades menores (centavos).
Todo cálculo de porcentajes pasa por Decimal con ROUND_HALF_UP;
nunca se usa float para dinero.

Autor: Equipo Paywall
Fecha: 2026-02-04
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP, ROUND_FLOOR
from typing import Union

Number = Union[int, Decimal, str]


def round_half_up(value: Decimal) -> int:
    """Redondea un Decimal al entero más cercano (0.5 hacia arriba)."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percent_of(amount_cents: int, percent: Number) -> int:
    """
    Porcentaje de un monto, redondeado half-up.

    Examples:
        >>> percent_of(499, 10)
        50
        >>> percent_of(1000, "2.9")
        29
    """
    return round_half_up(Decimal(amount_cents) * Decimal(str(percent)) / Decimal(100))


def floor_percent_of(amount_cents: int, percent: Number) -> int:
    """Porcentaje de un monto truncado hacia abajo (descuentos)."""
    value = Decimal(amount_cents) * Decimal(str(percent)) / Decimal(100)
    return int(value.quantize(Decimal("1"), rounding=ROUND_FLOOR))


def prorate(total_cents: int, part_cents: int, whole_cents: int) -> int:
    """total × part / whole con redondeo half-up (whole > 0)."""
    if whole_cents <= 0:
        raise ValueError("whole_cents must be positive")
    return round_half_up(Decimal(total_cents) * Decimal(part_cents) / Decimal(whole_cents))


def format_money(amount_cents: int, currency: str = "USD") -> str:
    """
    Formatea centavos como '4.99 USD'.

    Examples:
        >>> format_money(499)
        '4.99 USD'
    """
    sign = "-" if amount_cents < 0 else ""
    major, minor = divmod(abs(amount_cents), 100)
    return f"{sign}{major}.{minor:02d} {currency}"


__all__ = ["round_half_up", "percent_of", "floor_percent_of", "prorate", "format_money"]

# Fin del archivo paywall/shared/utils/money.py
