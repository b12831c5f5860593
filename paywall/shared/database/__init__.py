# -*- coding: utf-8 -*-
"""
paywall/shared/database/__init__.py

Re-exporta utilidades comunes de base de datos.

Autor: Equipo Paywall
Fecha: 2026-02-03
"""

from __future__ import annotations

from .base import Base, NAMING_CONVENTION, as_str_enum, UTCDateTime
from .database import (
    build_engine,
    build_session_factory,
    get_db,
    session_scope,
    check_database_health,
)
from .repository import BaseRepository

__all__ = [
    "Base",
    "NAMING_CONVENTION",
    "as_str_enum",
    "UTCDateTime",
    "build_engine",
    "build_session_factory",
    "get_db",
    "session_scope",
    "check_database_health",
    "BaseRepository",
]

# Fin del archivo paywall/shared/database/__init__.py
