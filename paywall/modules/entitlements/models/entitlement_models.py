# -*- coding: utf-8 -*-
"""
paywall/modules/entitlements/models/entitlement_models.py

Modelo ORM para entitlements.

- purchase_id UNIQUE: un entitlement por compra (emisión idempotente).
- token_id UNIQUE: 64 caracteres hex (256 bits de secrets.token_hex).
- El token no lleva claims: todo el estado vive aquí, por eso la
  revocación es inmediata.

Autor: Equipo Paywall
Fecha: 2026-02-10
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from paywall.shared.database.base import Base, UTCDateTime, as_str_enum
from paywall.shared.utils.datetime_helpers import utcnow
from paywall.modules.entitlements.enums import EntitlementStatus


class Entitlement(Base):
    __tablename__ = "entitlements"
    __table_args__ = (
        CheckConstraint("valid_from <= valid_to", name="valid_window"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    purchase_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("purchases.id", ondelete="RESTRICT"), nullable=False, unique=True
    )

    token_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    valid_from: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    valid_to: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    status: Mapped[EntitlementStatus] = mapped_column(
        as_str_enum(EntitlementStatus), nullable=False, default=EntitlementStatus.ACTIVE
    )

    revoked_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow, server_default=func.now()
    )

    def __repr__(self) -> str:
        # Nunca imprimir el token completo
        return (
            f"<Entitlement id={self.id} purchase={self.purchase_id} "
            f"status={self.status} token={self.token_id[:6]}…>"
        )


__all__ = ["Entitlement"]

# Fin del archivo paywall/modules/entitlements/models/entitlement_models.py
