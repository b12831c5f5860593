# -*- coding: utf-8 -*-
"""
paywall/modules/coupons/models/coupon_code_models.py

Modelo ORM para coupon_codes.

used_count solo se modifica vía UPDATE condicional atómico
(ver CouponRepository.try_increment_usage); el CHECK protege el tope
aun si otro escritor se salta el repositorio.

Autor: Equipo Paywall
Fecha: 2026-02-08
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from paywall.shared.database.base import Base, UTCDateTime, as_str_enum
from paywall.shared.utils.datetime_helpers import utcnow
from paywall.modules.coupons.enums import CouponStatus, DiscountType


class CouponCode(Base):
    """Definición reutilizable de descuento."""

    __tablename__ = "coupon_codes"
    __table_args__ = (
        CheckConstraint("discount_value >= 0", name="discount_value_non_negative"),
        CheckConstraint("used_count >= 0", name="used_count_non_negative"),
        CheckConstraint(
            "max_uses IS NULL OR used_count <= max_uses",
            name="used_count_within_max_uses",
        ),
        CheckConstraint("max_uses_per_viewer >= 1", name="max_uses_per_viewer_positive"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Siempre en mayúsculas (ver normalize_code)
    code: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)

    discount_type: Mapped[DiscountType] = mapped_column(as_str_enum(DiscountType), nullable=False)

    # percentage → puntos porcentuales; fixed_cents → centavos
    discount_value: Mapped[int] = mapped_column(Integer, nullable=False)

    # Alcance: NULL = sin restricción
    owner_account_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("owner_accounts.id", ondelete="CASCADE"), nullable=True, index=True
    )
    game_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("games.id", ondelete="CASCADE"), nullable=True, index=True
    )

    max_uses: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    max_uses_per_viewer: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    min_purchase_cents: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    valid_from: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    valid_to: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    status: Mapped[CouponStatus] = mapped_column(
        as_str_enum(CouponStatus), nullable=False, default=CouponStatus.ACTIVE
    )

    used_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    def __repr__(self) -> str:
        return (
            f"<CouponCode code={self.code} type={self.discount_type} "
            f"value={self.discount_value} used={self.used_count}/{self.max_uses}>"
        )


__all__ = ["CouponCode"]

# Fin del archivo paywall/modules/coupons/models/coupon_code_models.py
