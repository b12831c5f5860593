# -*- coding: utf-8 -*-
"""
paywall/modules/catalog/repositories/game_repository.py

Repositorio para la tabla games.

Autor: Equipo Paywall
Fecha: 2026-02-06
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from paywall.shared.database.repository import BaseRepository
from paywall.modules.catalog.models import Game


class GameRepository(BaseRepository[Game]):
    def __init__(self) -> None:
        super().__init__(Game)

    async def list_by_owner(self, session: AsyncSession, owner_account_id: UUID) -> Sequence[Game]:
        stmt = (
            select(Game)
            .where(Game.owner_account_id == owner_account_id)
            .order_by(Game.starts_at.desc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()

# Fin del archivo paywall/modules/catalog/repositories/game_repository.py
