# -*- coding: utf-8 -*-
"""
paywall/shared/utils/datetime_helpers.py

Utilidades para manejo consistente de timestamps UTC / ISO 8601.

Autor: Equipo Paywall
Fecha: 2026-02-03
"""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """
    Retorna el timestamp UTC actual (timezone-aware).

    Examples:
        >>> now = utcnow()
        >>> now.tzinfo == timezone.utc
        True
    """
    return datetime.now(timezone.utc)


def from_iso8601(iso_string: str) -> datetime:
    """
    Parsea una cadena ISO 8601 y retorna datetime UTC timezone-aware.

    Examples:
        >>> dt = from_iso8601("2026-02-03T14:30:00Z")
        >>> dt.tzinfo == timezone.utc
        True
    """
    dt = datetime.fromisoformat(iso_string.replace("Z", "+00:00"))
    return ensure_utc(dt)


def ensure_utc(dt: datetime) -> datetime:
    """
    Asegura que un datetime sea UTC timezone-aware.
    Los naive se asumen UTC (SQLite devuelve naive).
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    elif dt.tzinfo != timezone.utc:
        return dt.astimezone(timezone.utc)
    return dt


def to_iso8601(dt: Optional[datetime]) -> Optional[str]:
    """Serializa a ISO 8601 con sufijo Z (None pasa tal cual)."""
    if dt is None:
        return None
    return ensure_utc(dt).isoformat().replace("+00:00", "Z")


__all__ = ["utcnow", "from_iso8601", "ensure_utc", "to_iso8601"]

# Fin del archivo paywall/shared/utils/datetime_helpers.py
