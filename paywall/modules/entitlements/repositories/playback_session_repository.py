# -*- coding: utf-8 -*-
"""
paywall/modules/entitlements/repositories/playback_session_repository.py

Repositorio para playback_sessions.

Autor: Equipo Paywall
Fecha: 2026-02-10
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from paywall.shared.database.repository import BaseRepository
from paywall.modules.entitlements.enums import PlaybackSessionState
from paywall.modules.entitlements.models import PlaybackSession


class PlaybackSessionRepository(BaseRepository[PlaybackSession]):
    def __init__(self) -> None:
        super().__init__(PlaybackSession)

    async def list_active_by_entitlement(
        self, session: AsyncSession, entitlement_id: UUID
    ) -> Sequence[PlaybackSession]:
        stmt = select(PlaybackSession).where(
            PlaybackSession.entitlement_id == entitlement_id,
            PlaybackSession.state == PlaybackSessionState.ACTIVE,
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_by_entitlement(
        self, session: AsyncSession, entitlement_id: UUID
    ) -> Sequence[PlaybackSession]:
        stmt = (
            select(PlaybackSession)
            .where(PlaybackSession.entitlement_id == entitlement_id)
            .order_by(PlaybackSession.started_at)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

# Fin del archivo paywall/modules/entitlements/repositories/playback_session_repository.py
