# -*- coding: utf-8 -*-
"""
paywall/shared/database/base.py

Base declarativa y convención de nombres para modelos ORM.

Este módulo proporciona:
- Base: clase base declarativa de SQLAlchemy
- NAMING_CONVENTION: convención de nombres para constraints
- as_str_enum: helper para mapear enums Python a columnas VARCHAR + CHECK
  (portable entre PostgreSQL y SQLite)
- UTCDateTime: DateTime con zona horaria que siempre devuelve UTC aware

Autor: Equipo Paywall
Fecha: 2026-02-03
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional, Type

from sqlalchemy import DateTime, MetaData
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

from paywall.shared.utils.datetime_helpers import ensure_utc

# ===== NAMING CONVENTION =====
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


# ===== BASE DECLARATIVA =====
class Base(DeclarativeBase):
    """
    Base declarativa para todos los modelos ORM del paywall.
    Incluye convención de nombres para constraints.
    """
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


# ===== HELPER PARA ENUMS =====
def as_str_enum(enum_cls: Type[Enum], name: Optional[str] = None) -> SAEnum:
    """
    Devuelve un tipo Enum de SQLAlchemy persistido como VARCHAR con CHECK.

    Uso típico:

        from paywall.shared.database.base import Base, as_str_enum
        from ..enums import PurchaseStatus

        class Purchase(Base):
            status: Mapped[PurchaseStatus] = mapped_column(
                as_str_enum(PurchaseStatus, name="purchase_status"),
                nullable=False,
            )

    - Se guarda el .value del enum (no el nombre del miembro).
    - native_enum=False: no requiere CREATE TYPE en PostgreSQL.
    """
    enum_name = name or getattr(enum_cls, "__db_enum_name__", enum_cls.__name__.lower())

    def _values(_: object) -> list[str]:
        return [e.value for e in enum_cls]  # type: ignore[arg-type]

    return SAEnum(
        enum_cls,
        name=enum_name,
        native_enum=False,
        create_constraint=True,
        validate_strings=True,
        length=32,
        values_callable=_values,
    )


# ===== DATETIME UTC =====
class UTCDateTime(TypeDecorator):
    """DateTime(timezone=True) que normaliza a UTC aware al leer y escribir."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        return ensure_utc(value)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        return ensure_utc(value)


__all__ = ["Base", "NAMING_CONVENTION", "as_str_enum", "UTCDateTime"]

# Fin del archivo paywall/shared/database/base.py
