# -*- coding: utf-8 -*-
"""
paywall/modules/coupons/models/coupon_redemption_models.py

Modelo ORM para coupon_redemptions.
purchase_id es UNIQUE: una compra se descuenta a lo sumo una vez.

Autor: Equipo Paywall
Fecha: 2026-02-08
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, Integer, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from paywall.shared.database.base import Base, UTCDateTime
from paywall.shared.utils.datetime_helpers import utcnow


class CouponRedemption(Base):
    __tablename__ = "coupon_redemptions"
    __table_args__ = (
        Index("ix_coupon_redemptions_coupon_viewer", "coupon_id", "viewer_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    coupon_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("coupon_codes.id", ondelete="RESTRICT"), nullable=False
    )
    purchase_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("purchases.id", ondelete="RESTRICT"), nullable=False, unique=True
    )
    viewer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("viewer_identities.id", ondelete="RESTRICT"), nullable=False
    )

    discount_cents: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow, server_default=func.now()
    )

    def __repr__(self) -> str:
        return (
            f"<CouponRedemption coupon={self.coupon_id} purchase={self.purchase_id} "
            f"discount_cents={self.discount_cents}>"
        )


__all__ = ["CouponRedemption"]

# Fin del archivo paywall/modules/coupons/models/coupon_redemption_models.py
