# -*- coding: utf-8 -*-
"""
paywall/modules/entitlements/repositories/entitlement_repository.py

Repositorio para entitlements (búsqueda por compra y por token).

Autor: Equipo Paywall
Fecha: 2026-02-10
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from paywall.shared.database.repository import BaseRepository
from paywall.modules.entitlements.models import Entitlement


class EntitlementRepository(BaseRepository[Entitlement]):
    def __init__(self) -> None:
        super().__init__(Entitlement)

    async def get_by_purchase_id(
        self, session: AsyncSession, purchase_id: UUID
    ) -> Optional[Entitlement]:
        stmt = select(Entitlement).where(Entitlement.purchase_id == purchase_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_token_id(self, session: AsyncSession, token_id: str) -> Optional[Entitlement]:
        stmt = select(Entitlement).where(Entitlement.token_id == token_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

# Fin del archivo paywall/modules/entitlements/repositories/entitlement_repository.py
