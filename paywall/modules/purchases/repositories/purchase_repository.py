# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/repositories/purchase_repository.py

Repositorio para purchases (sin delete: las compras no se borran).

Autor: Equipo Paywall
Fecha: 2026-02-11
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from paywall.shared.database.repository import BaseRepository
from paywall.modules.purchases.models import Purchase


class PurchaseRepository(BaseRepository[Purchase]):
    def __init__(self) -> None:
        super().__init__(Purchase)

    async def delete(self, session: AsyncSession, obj: Purchase) -> None:
        raise TypeError("purchases are never deleted")

    async def get_by_provider_payment_id(
        self, session: AsyncSession, provider_payment_id: str
    ) -> Optional[Purchase]:
        stmt = select(Purchase).where(Purchase.payment_provider_payment_id == provider_payment_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

# Fin del archivo paywall/modules/purchases/repositories/purchase_repository.py
