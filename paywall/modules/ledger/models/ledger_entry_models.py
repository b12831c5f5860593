# -*- coding: utf-8 -*-
"""
paywall/modules/ledger/models/ledger_entry_models.py

Modelo ORM para ledger_entries.

Cada fila es un movimiento inmutable:
- amount_cents > 0 → abono a la cuenta del dueño
- amount_cents < 0 → cargo (comisiones, reembolsos, payouts)

La terna (reference_type, reference_id, type) es única: es la clave
natural que hace idempotente el posteo ante webhooks duplicados.

Autor: Equipo Paywall
Fecha: 2026-02-07
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from paywall.shared.database.base import Base, UTCDateTime, as_str_enum
from paywall.shared.utils.datetime_helpers import utcnow
from paywall.modules.ledger.enums import LedgerEntryType, LedgerReferenceType


class LedgerEntry(Base):
    """Movimiento financiero inmutable atribuido a una cuenta de dueño."""

    __tablename__ = "ledger_entries"
    __table_args__ = (
        UniqueConstraint(
            "reference_type",
            "reference_id",
            "type",
            name="uq_ledger_entries_reference_type",
        ),
        Index("ix_ledger_entries_owner_created", "owner_account_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    owner_account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("owner_accounts.id", ondelete="RESTRICT"),
        nullable=False,
    )

    type: Mapped[LedgerEntryType] = mapped_column(
        as_str_enum(LedgerEntryType),
        nullable=False,
    )

    amount_cents: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        doc="+N abono, -N cargo (centavos)",
    )

    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    reference_type: Mapped[LedgerReferenceType] = mapped_column(
        as_str_enum(LedgerReferenceType),
        nullable=False,
    )

    # purchase.id (uuid en texto) o id de reembolso/payout del gateway
    reference_id: Mapped[str] = mapped_column(String(128), nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    def __repr__(self) -> str:  # pragma: no cover - representacional
        return (
            f"<LedgerEntry id={self.id} owner={self.owner_account_id} "
            f"type={self.type} amount_cents={self.amount_cents}>"
        )

# Fin del archivo paywall/modules/ledger/models/ledger_entry_models.py
