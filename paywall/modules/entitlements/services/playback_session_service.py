# -*- coding: utf-8 -*-
"""
paywall/modules/entitlements/services/playback_session_service.py

PlaybackSessionTracker: abre sesiones de reproducción contra un
entitlement válido, acumula telemetría y las cierra una sola vez.

Reglas:
- Cada apertura re-valida el entitlement (aunque el llamador haya
  validado antes): nunca hay sesión sobre un token vencido o revocado.
- end_session() rechaza resúmenes con negativos o buffer > watch; cerrar
  una sesión ya cerrada devuelve el registro guardado sin tocarlo.
- Al cerrar se guarda el reembolso sugerido por calidad (si aplica),
  calculado sobre la telemetría de todas las sesiones del entitlement.
  Sin horario del partido se asume una duración de 90 minutos.

Autor: Equipo Paywall
Fecha: 2026-02-10
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from paywall.shared.errors import InvalidStateError, NotFoundError
from paywall.shared.utils.datetime_helpers import utcnow
from paywall.modules.catalog.repositories import GameRepository
from paywall.modules.entitlements.enums import PlaybackSessionState
from paywall.modules.entitlements.models import Entitlement, PlaybackSession
from paywall.modules.entitlements.repositories import PlaybackSessionRepository
from paywall.modules.purchases.repositories import PurchaseRepository
from .entitlement_service import EntitlementService
from .refund_calculator import DEFAULT_GAME_DURATION_MS, QualityRefund, calculate_quality_refund
from .telemetry import TelemetryEvent, TelemetrySummary, aggregate_telemetry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlaybackSessionStarted:
    session_id: UUID
    started_at: datetime
    entitlement_id: UUID


class PlaybackSessionService:
    """PlaybackSessionTracker."""

    def __init__(
        self,
        session_repo: PlaybackSessionRepository,
        entitlement_service: EntitlementService,
        purchase_repo: PurchaseRepository,
        game_repo: GameRepository,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.session_repo = session_repo
        self.entitlement_service = entitlement_service
        self.purchase_repo = purchase_repo
        self.game_repo = game_repo
        self._clock = clock

    # ---------------------------------------------------------
    # Apertura
    # ---------------------------------------------------------
    async def create_session(
        self,
        session: AsyncSession,
        token_id: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> PlaybackSessionStarted:
        entitlement = await self.entitlement_service.require_valid_token(session, token_id)
        return await self._open(session, entitlement, metadata)

    async def create_session_for_entitlement(
        self,
        session: AsyncSession,
        entitlement_id: UUID,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> PlaybackSessionStarted:
        entitlement = await self.entitlement_service.require_valid_entitlement(session, entitlement_id)
        return await self._open(session, entitlement, metadata)

    async def _open(
        self,
        session: AsyncSession,
        entitlement: Entitlement,
        metadata: Optional[Dict[str, Any]],
    ) -> PlaybackSessionStarted:
        playback = await self.session_repo.create(
            session,
            entitlement_id=entitlement.id,
            started_at=self._clock(),
            state=PlaybackSessionState.ACTIVE,
            session_metadata=metadata or None,
        )
        logger.info(
            "playback_session_started session_id=%s entitlement_id=%s",
            playback.id, entitlement.id,
        )
        return PlaybackSessionStarted(
            session_id=playback.id,
            started_at=playback.started_at,
            entitlement_id=entitlement.id,
        )

    # ---------------------------------------------------------
    # Telemetría
    # ---------------------------------------------------------
    async def submit_telemetry(
        self,
        session: AsyncSession,
        session_id: UUID,
        events: Sequence[TelemetryEvent],
    ) -> PlaybackSession:
        playback = await self._get_or_404(session, session_id)
        if not events:
            return playback
        if playback.is_ended:
            raise InvalidStateError(
                PlaybackSessionState.ENDED,
                PlaybackSessionState.ACTIVE,
                "Playback session already ended",
            )

        partial = aggregate_telemetry(events, playback.started_at)
        current = TelemetrySummary(
            total_watch_ms=playback.total_watch_ms,
            total_buffer_ms=playback.total_buffer_ms,
            buffer_events=playback.buffer_events,
            fatal_errors=playback.fatal_errors,
            startup_latency_ms=playback.startup_latency_ms,
            stream_down_ms=playback.stream_down_ms,
        )
        self._store_aggregates(playback, current.merged_with(partial))
        await session.flush()

        logger.debug(
            "playback_telemetry_accepted session_id=%s events=%d watch_ms=%d buffer_ms=%d",
            session_id, len(events), playback.total_watch_ms, playback.total_buffer_ms,
        )
        return playback

    # ---------------------------------------------------------
    # Cierre
    # ---------------------------------------------------------
    async def end_session(
        self,
        session: AsyncSession,
        session_id: UUID,
        summary: TelemetrySummary,
    ) -> PlaybackSession:
        playback = await self._get_or_404(session, session_id)
        summary.validate()

        if playback.is_ended:
            logger.info("playback_session_already_ended session_id=%s", session_id)
            return playback

        self._store_aggregates(playback, summary)
        playback.state = PlaybackSessionState.ENDED
        playback.ended_at = self._clock()

        suggestion = await self._suggest_quality_refund(session, playback, summary)
        if suggestion is not None:
            playback.quality_refund_cents = suggestion.amount_cents
            playback.quality_refund_rule = suggestion.applied_rule
            playback.quality_refund_rule_version = suggestion.rule_version
            logger.info(
                "playback_quality_refund_suggested session_id=%s amount_cents=%d rule=%s",
                session_id, suggestion.amount_cents, suggestion.applied_rule,
            )

        await session.flush()
        logger.info(
            "playback_session_ended session_id=%s watch_ms=%d buffer_ms=%d fatal_errors=%d",
            session_id, summary.total_watch_ms, summary.total_buffer_ms, summary.fatal_errors,
        )
        return playback

    async def close_for_entitlement(self, session: AsyncSession, entitlement_id: UUID) -> int:
        """Cierra las sesiones activas de un entitlement revocado con sus agregados actuales."""
        active = await self.session_repo.list_active_by_entitlement(session, entitlement_id)
        now = self._clock()
        for playback in active:
            playback.state = PlaybackSessionState.ENDED
            playback.ended_at = now
        if active:
            await session.flush()
            logger.info("playback_sessions_closed entitlement_id=%s count=%d", entitlement_id, len(active))
        return len(active)

    # ---------------------------------------------------------
    # Internos
    # ---------------------------------------------------------
    async def _get_or_404(self, session: AsyncSession, session_id: UUID) -> PlaybackSession:
        playback = await self.session_repo.get(session, session_id)
        if playback is None:
            raise NotFoundError("Playback session", session_id)
        return playback

    @staticmethod
    def _store_aggregates(playback: PlaybackSession, summary: TelemetrySummary) -> None:
        playback.total_watch_ms = summary.total_watch_ms
        playback.total_buffer_ms = summary.total_buffer_ms
        playback.buffer_events = summary.buffer_events
        playback.fatal_errors = summary.fatal_errors
        playback.startup_latency_ms = summary.startup_latency_ms
        playback.stream_down_ms = summary.stream_down_ms

    async def _suggest_quality_refund(
        self,
        session: AsyncSession,
        playback: PlaybackSession,
        summary: TelemetrySummary,
    ) -> Optional[QualityRefund]:
        entitlement = await self.entitlement_service.entitlement_repo.get(session, playback.entitlement_id)
        if entitlement is None:
            return None
        purchase = await self.purchase_repo.get(session, entitlement.purchase_id)
        if purchase is None:
            return None

        # El reembolso es por compra: suma las demás sesiones del mismo entitlement
        combined = summary
        for other in await self.session_repo.list_by_entitlement(session, playback.entitlement_id):
            if other.id != playback.id:
                combined = combined.merged_with(_stored_summary(other))

        expected_ms = DEFAULT_GAME_DURATION_MS
        game = await self.game_repo.get(session, purchase.game_id)
        if game is not None and game.starts_at is not None and game.ends_at is not None:
            scheduled_ms = int((game.ends_at - game.starts_at).total_seconds() * 1000)
            if scheduled_ms > 0:
                expected_ms = scheduled_ms

        return calculate_quality_refund(purchase.amount_cents, combined, expected_ms)


def _stored_summary(playback: PlaybackSession) -> TelemetrySummary:
    return TelemetrySummary(
        total_watch_ms=playback.total_watch_ms or 0,
        total_buffer_ms=playback.total_buffer_ms or 0,
        buffer_events=playback.buffer_events or 0,
        fatal_errors=playback.fatal_errors or 0,
        startup_latency_ms=playback.startup_latency_ms,
        stream_down_ms=playback.stream_down_ms or 0,
    )


__all__ = ["PlaybackSessionService", "PlaybackSessionStarted"]

# Fin del archivo paywall/modules/entitlements/services/playback_session_service.py
