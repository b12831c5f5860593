# -*- coding: utf-8 -*-
"""
paywall/modules/entitlements/schemas/__init__.py

Esquemas Pydantic de /public/watch y /admin/entitlements.
Los cuerpos de telemetría aceptan snake_case y camelCase (el reproductor
web envía camelCase).

Autor: Equipo Paywall
Fecha: 2026-02-10
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from paywall.modules.entitlements.enums import (
    EntitlementStatus,
    PlaybackSessionState,
    TelemetryEventType,
)
from paywall.modules.entitlements.services import TelemetryEvent, TelemetrySummary


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# ACCESO
# =============================================================================

class WatchAccessResponse(BaseModel):
    valid: bool
    entitlement_id: UUID
    purchase_id: UUID
    game_id: UUID
    valid_from: datetime
    valid_to: datetime


class PlaybackSessionCreateRequest(BaseModel):
    metadata: Optional[Dict[str, Any]] = None


class PlaybackSessionCreatedResponse(BaseModel):
    session_id: UUID
    started_at: datetime


# =============================================================================
# TELEMETRÍA
# =============================================================================

class TelemetryEventIn(_CamelModel):
    type: TelemetryEventType
    timestamp: int = Field(ge=0, description="Epoch en milisegundos")
    duration: Optional[int] = Field(default=None, ge=0)
    error_code: Optional[str] = Field(default=None, max_length=64)

    def to_event(self) -> TelemetryEvent:
        return TelemetryEvent(
            type=self.type,
            timestamp=self.timestamp,
            duration=self.duration,
            error_code=self.error_code,
        )


class TelemetryBatchRequest(BaseModel):
    events: List[TelemetryEventIn] = Field(default_factory=list, max_length=500)


class TelemetrySummaryIn(_CamelModel):
    total_watch_ms: int
    total_buffer_ms: int
    buffer_events: int = 0
    fatal_errors: int = 0
    startup_latency_ms: Optional[int] = None
    stream_down_ms: int = 0

    def to_summary(self) -> TelemetrySummary:
        return TelemetrySummary(**self.model_dump())


class PlaybackSessionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    entitlement_id: UUID
    state: PlaybackSessionState
    started_at: datetime
    ended_at: Optional[datetime] = None
    total_watch_ms: int
    total_buffer_ms: int
    buffer_events: int
    fatal_errors: int
    startup_latency_ms: Optional[int] = None
    stream_down_ms: int
    quality_refund_cents: Optional[int] = None
    quality_refund_rule: Optional[str] = None


# =============================================================================
# ADMIN
# =============================================================================

class EntitlementOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    purchase_id: UUID
    status: EntitlementStatus
    valid_from: datetime
    valid_to: datetime
    revoked_at: Optional[datetime] = None


class EntitlementRevokeResponse(EntitlementOut):
    closed_sessions: int = 0


__all__ = [
    "WatchAccessResponse",
    "PlaybackSessionCreateRequest",
    "PlaybackSessionCreatedResponse",
    "TelemetryEventIn",
    "TelemetryBatchRequest",
    "TelemetrySummaryIn",
    "PlaybackSessionOut",
    "EntitlementOut",
    "EntitlementRevokeResponse",
]

# Fin del archivo paywall/modules/entitlements/schemas/__init__.py
