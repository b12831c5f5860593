# -*- coding: utf-8 -*-
"""
paywall/modules/entitlements/models/playback_session_models.py

Modelo ORM para playback_sessions.

Los agregados de telemetría se acumulan mientras la sesión está activa
y se fijan una sola vez al cerrarla. quality_refund_* registra el
reembolso sugerido por calidad (no mueve dinero).

Autor: Equipo Paywall
Fecha: 2026-02-10
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, CheckConstraint, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from paywall.shared.database.base import Base, UTCDateTime, as_str_enum
from paywall.shared.utils.datetime_helpers import utcnow
from paywall.modules.entitlements.enums import PlaybackSessionState


class PlaybackSession(Base):
    __tablename__ = "playback_sessions"
    __table_args__ = (
        CheckConstraint("total_watch_ms >= 0", name="watch_non_negative"),
        CheckConstraint("total_buffer_ms >= 0", name="buffer_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    entitlement_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("entitlements.id", ondelete="CASCADE"), nullable=False, index=True
    )

    started_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    ended_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    state: Mapped[PlaybackSessionState] = mapped_column(
        as_str_enum(PlaybackSessionState), nullable=False, default=PlaybackSessionState.ACTIVE
    )

    # ===== Agregados de telemetría =====
    total_watch_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_buffer_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    buffer_events: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    fatal_errors: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    startup_latency_ms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    stream_down_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # ===== Reembolso sugerido por calidad =====
    quality_refund_cents: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    quality_refund_rule: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    quality_refund_rule_version: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)

    # user agent, dispositivo, etc.
    session_metadata: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    @property
    def is_ended(self) -> bool:
        return self.state == PlaybackSessionState.ENDED

    def __repr__(self) -> str:
        return f"<PlaybackSession id={self.id} state={self.state} watch_ms={self.total_watch_ms}>"


__all__ = ["PlaybackSession"]

# Fin del archivo paywall/modules/entitlements/models/playback_session_models.py
