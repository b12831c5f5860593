# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/models/purchase_models.py

Modelo ORM para purchases.

Invariantes a nivel de tabla:
- amount_cents ≥ 0
- platform_fee_cents + processor_fee_cents ≤ amount_cents
- paid_at y failed_at nunca ambos presentes
- refunded_amount_cents ≤ amount_cents

La fila nunca se borra; solo PurchaseStateMachine cambia su estado.

Autor: Equipo Paywall
Fecha: 2026-02-11
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from paywall.shared.database.base import Base, UTCDateTime, as_str_enum
from paywall.shared.utils.datetime_helpers import utcnow
from paywall.modules.purchases.enums import PurchaseStatus


class Purchase(Base):
    """Un intento de checkout de un espectador para un juego."""

    __tablename__ = "purchases"
    __table_args__ = (
        CheckConstraint("amount_cents >= 0", name="amount_non_negative"),
        CheckConstraint("discount_cents >= 0", name="discount_non_negative"),
        CheckConstraint(
            "platform_fee_cents >= 0 AND processor_fee_cents >= 0",
            name="fees_non_negative",
        ),
        CheckConstraint(
            "platform_fee_cents + processor_fee_cents <= amount_cents",
            name="fees_within_amount",
        ),
        CheckConstraint(
            "NOT (paid_at IS NOT NULL AND failed_at IS NOT NULL)",
            name="paid_or_failed",
        ),
        CheckConstraint(
            "refunded_amount_cents >= 0 AND refunded_amount_cents <= amount_cents",
            name="refunded_within_amount",
        ),
        Index("ix_purchases_game_viewer", "game_id", "viewer_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    game_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("games.id", ondelete="RESTRICT"), nullable=False
    )
    viewer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("viewer_identities.id", ondelete="RESTRICT"), nullable=False
    )
    recipient_owner_account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("owner_accounts.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    # ===== Montos (centavos) =====
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False, doc="Bruto cobrado (con descuento)")
    original_amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    discount_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    coupon_code_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("coupon_codes.id", ondelete="RESTRICT"), nullable=True
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    platform_fee_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Estimado al crear; se reemplaza por el reportado por el gateway al pagar
    processor_fee_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    owner_net_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # ===== Estado =====
    status: Mapped[PurchaseStatus] = mapped_column(
        as_str_enum(PurchaseStatus), nullable=False, default=PurchaseStatus.CREATED, index=True
    )

    payment_provider_payment_id: Mapped[Optional[str]] = mapped_column(
        String(128), nullable=True, unique=True
    )
    payment_provider_customer_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    failure_reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    paid_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    failed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    refunded_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    refunded_amount_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    def __repr__(self) -> str:
        return (
            f"<Purchase id={self.id} status={self.status} amount_cents={self.amount_cents} "
            f"provider_payment_id={self.payment_provider_payment_id}>"
        )


__all__ = ["Purchase"]

# Fin del archivo paywall/modules/purchases/models/purchase_models.py
