# -*- coding: utf-8 -*-
"""
paywall/modules/catalog/models/game_models.py

Modelo ORM para la tabla games.

Autor: Equipo Paywall
Fecha: 2026-02-06
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from paywall.shared.database.base import Base, UTCDateTime, as_str_enum
from paywall.shared.utils.datetime_helpers import utcnow
from paywall.modules.catalog.enums import GameState, PURCHASABLE_GAME_STATES


class Game(Base):
    """Transmisión vendible: precio, estado y horario programado."""

    __tablename__ = "games"
    __table_args__ = (
        CheckConstraint("price_cents >= 0", name="price_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    owner_account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("owner_accounts.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)

    state: Mapped[GameState] = mapped_column(
        as_str_enum(GameState),
        nullable=False,
        default=GameState.SCHEDULED,
    )

    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)

    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    starts_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    # Determina la vigencia del entitlement cuando existe
    ends_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow, server_default=func.now()
    )

    @property
    def is_purchasable(self) -> bool:
        return self.state in PURCHASABLE_GAME_STATES

    def __repr__(self) -> str:
        return f"<Game id={self.id} state={self.state} price_cents={self.price_cents}>"


__all__ = ["Game"]

# Fin del archivo paywall/modules/catalog/models/game_models.py
