# -*- coding: utf-8 -*-
"""
paywall/modules/entitlements/routes/watch_routes.py

Rutas públicas del reproductor:
- GET  /public/watch/{token}                      → valida el token (bootstrap)
- POST /public/watch/{token}/sessions             → abre sesión de reproducción
- POST /public/watch/sessions/{session_id}/telemetry
- POST /public/watch/sessions/{session_id}/end

Un token inválido, vencido o revocado responde siempre 401 "Access denied".

Autor: Equipo Paywall
Fecha: 2026-02-10
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from paywall.core.container import PaywallEngine, get_engine
from paywall.shared.database import get_db
from paywall.shared.errors import NotFoundError
from paywall.modules.entitlements.schemas import (
    PlaybackSessionCreateRequest,
    PlaybackSessionCreatedResponse,
    PlaybackSessionOut,
    TelemetryBatchRequest,
    TelemetrySummaryIn,
    WatchAccessResponse,
)

router = APIRouter(prefix="/public/watch", tags=["watch"])


@router.get("/{token}", response_model=WatchAccessResponse)
async def check_watch_access(
    token: str,
    db: AsyncSession = Depends(get_db),
    engine: PaywallEngine = Depends(get_engine),
) -> WatchAccessResponse:
    entitlement = await engine.entitlements.require_valid_token(db, token)
    purchase = await engine.purchase_repo.get(db, entitlement.purchase_id)
    if purchase is None:
        raise NotFoundError("Purchase", entitlement.purchase_id)
    return WatchAccessResponse(
        valid=True,
        entitlement_id=entitlement.id,
        purchase_id=purchase.id,
        game_id=purchase.game_id,
        valid_from=entitlement.valid_from,
        valid_to=entitlement.valid_to,
    )


@router.post(
    "/{token}/sessions",
    response_model=PlaybackSessionCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_playback_session(
    token: str,
    payload: Optional[PlaybackSessionCreateRequest] = Body(default=None),
    db: AsyncSession = Depends(get_db),
    engine: PaywallEngine = Depends(get_engine),
) -> PlaybackSessionCreatedResponse:
    started = await engine.playback.create_session(
        db, token, metadata=payload.metadata if payload else None
    )
    await db.commit()
    return PlaybackSessionCreatedResponse(session_id=started.session_id, started_at=started.started_at)


@router.post("/sessions/{session_id}/telemetry", response_model=PlaybackSessionOut)
async def submit_telemetry(
    session_id: UUID,
    payload: TelemetryBatchRequest,
    db: AsyncSession = Depends(get_db),
    engine: PaywallEngine = Depends(get_engine),
) -> PlaybackSessionOut:
    playback = await engine.playback.submit_telemetry(
        db, session_id, [e.to_event() for e in payload.events]
    )
    await db.commit()
    return PlaybackSessionOut.model_validate(playback)


@router.post("/sessions/{session_id}/end", response_model=PlaybackSessionOut)
async def end_playback_session(
    session_id: UUID,
    payload: TelemetrySummaryIn,
    db: AsyncSession = Depends(get_db),
    engine: PaywallEngine = Depends(get_engine),
) -> PlaybackSessionOut:
    playback = await engine.playback.end_session(db, session_id, payload.to_summary())
    await db.commit()
    return PlaybackSessionOut.model_validate(playback)

# Fin del archivo paywall/modules/entitlements/routes/watch_routes.py
