# -*- coding: utf-8 -*-
"""
paywall/modules/catalog/models/viewer_models.py

Modelo ORM para la tabla viewer_identities.

Autor: Equipo Paywall
Fecha: 2026-02-06
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from paywall.shared.database.base import Base, UTCDateTime
from paywall.shared.utils.datetime_helpers import utcnow


class ViewerIdentity(Base):
    """Espectador identificado por email (siempre en minúsculas)."""

    __tablename__ = "viewer_identities"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)

    phone_e164: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow, server_default=func.now()
    )


__all__ = ["ViewerIdentity"]

# Fin del archivo paywall/modules/catalog/models/viewer_models.py
