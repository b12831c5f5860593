# -*- coding: utf-8 -*-
"""
paywall/modules/catalog/models/owner_account_models.py

Modelo ORM para la tabla owner_accounts.

Autor: Equipo Paywall
Fecha: 2026-02-06
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from paywall.shared.database.base import Base, UTCDateTime, as_str_enum
from paywall.shared.utils.datetime_helpers import utcnow
from paywall.modules.catalog.enums import OwnerAccountStatus


class OwnerAccount(Base):
    """Cuenta del dueño de eventos; destinataria del neto de cada compra."""

    __tablename__ = "owner_accounts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    display_name: Mapped[str] = mapped_column(String(200), nullable=False)

    status: Mapped[OwnerAccountStatus] = mapped_column(
        as_str_enum(OwnerAccountStatus),
        nullable=False,
        default=OwnerAccountStatus.ACTIVE,
    )

    # merchant id del gateway (Square) para el split
    payout_provider_ref: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow, server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<OwnerAccount id={self.id} status={self.status}>"


__all__ = ["OwnerAccount"]

# Fin del archivo paywall/modules/catalog/models/owner_account_models.py
