# -*- coding: utf-8 -*-
"""
paywall/modules/ledger/repositories/ledger_entry_repository.py

Repositorio del ledger (solo inserción y lectura: nunca update/delete).

Autor: Equipo Paywall
Fecha: 2026-02-07
"""

from typing import Dict, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from paywall.shared.database.repository import BaseRepository
from paywall.modules.ledger.enums import LedgerEntryType, LedgerReferenceType
from paywall.modules.ledger.models import LedgerEntry


class LedgerEntryRepository(BaseRepository[LedgerEntry]):
    def __init__(self) -> None:
        super().__init__(LedgerEntry)

    async def delete(self, session: AsyncSession, obj: LedgerEntry) -> None:
        raise TypeError("ledger entries are immutable")

    # -----------------------------------------------------------
    # Clave natural (idempotencia)
    # -----------------------------------------------------------
    async def list_by_reference(
        self,
        session: AsyncSession,
        reference_type: LedgerReferenceType,
        reference_id: str,
    ) -> Sequence[LedgerEntry]:
        stmt = (
            select(LedgerEntry)
            .where(
                LedgerEntry.reference_type == reference_type,
                LedgerEntry.reference_id == reference_id,
            )
            .order_by(LedgerEntry.created_at, LedgerEntry.type)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def existing_types_for(
        self,
        session: AsyncSession,
        reference_type: LedgerReferenceType,
        reference_id: str,
    ) -> set[LedgerEntryType]:
        stmt = select(LedgerEntry.type).where(
            LedgerEntry.reference_type == reference_type,
            LedgerEntry.reference_id == reference_id,
        )
        result = await session.execute(stmt)
        return set(result.scalars().all())

    async def exists_for(
        self,
        session: AsyncSession,
        reference_type: LedgerReferenceType,
        reference_id: str,
        entry_type: LedgerEntryType,
    ) -> bool:
        stmt = select(LedgerEntry.id).where(
            LedgerEntry.reference_type == reference_type,
            LedgerEntry.reference_id == reference_id,
            LedgerEntry.type == entry_type,
        ).limit(1)
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def list_by_reference_ids(
        self,
        session: AsyncSession,
        reference_type: LedgerReferenceType,
        reference_ids: Sequence[str],
    ) -> Sequence[LedgerEntry]:
        if not reference_ids:
            return []
        stmt = select(LedgerEntry).where(
            LedgerEntry.reference_type == reference_type,
            LedgerEntry.reference_id.in_(list(reference_ids)),
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    # -----------------------------------------------------------
    # Saldo y desglose por dueño
    # -----------------------------------------------------------
    async def compute_balance(self, session: AsyncSession, owner_account_id: UUID) -> int:
        stmt = select(func.coalesce(func.sum(LedgerEntry.amount_cents), 0)).where(
            LedgerEntry.owner_account_id == owner_account_id
        )
        result = await session.execute(stmt)
        return int(result.scalar_one())

    async def totals_by_type(
        self, session: AsyncSession, owner_account_id: UUID
    ) -> Dict[LedgerEntryType, int]:
        stmt = (
            select(LedgerEntry.type, func.sum(LedgerEntry.amount_cents))
            .where(LedgerEntry.owner_account_id == owner_account_id)
            .group_by(LedgerEntry.type)
        )
        result = await session.execute(stmt)
        return {LedgerEntryType(row[0]): int(row[1] or 0) for row in result.all()}

    async def list_by_owner(
        self,
        session: AsyncSession,
        owner_account_id: UUID,
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[LedgerEntry]:
        stmt = (
            select(LedgerEntry)
            .where(LedgerEntry.owner_account_id == owner_account_id)
            .order_by(LedgerEntry.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

# Fin del archivo paywall/modules/ledger/repositories/ledger_entry_repository.py
