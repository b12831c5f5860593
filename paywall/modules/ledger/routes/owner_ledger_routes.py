# -*- coding: utf-8 -*-
"""
paywall/modules/ledger/routes/owner_ledger_routes.py

Transparencia del dueño:
- GET /owners/{owner_account_id}/ledger/balance

Devuelve el saldo exacto (suma de movimientos), el desglose por tipo y
los movimientos más recientes.

Autor: Equipo Paywall
Fecha: 2026-02-07
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from paywall.core.container import PaywallEngine, get_engine
from paywall.shared.database import get_db
from paywall.shared.errors import NotFoundError
from paywall.modules.ledger.schemas import LedgerBalanceResponse, LedgerEntryOut

router = APIRouter(prefix="/owners", tags=["ledger"])


@router.get("/{owner_account_id}/ledger/balance", response_model=LedgerBalanceResponse)
async def get_owner_balance(
    owner_account_id: UUID,
    limit: int = Query(default=20, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    engine: PaywallEngine = Depends(get_engine),
) -> LedgerBalanceResponse:
    owner = await engine.owner_repo.get(db, owner_account_id)
    if owner is None:
        raise NotFoundError("Owner account", owner_account_id)

    breakdown = await engine.ledger.get_transparency(db, owner_account_id)
    entries = await engine.ledger_repo.list_by_owner(db, owner_account_id, limit=limit)

    return LedgerBalanceResponse(
        **breakdown.to_dict(),
        recent_entries=[LedgerEntryOut.model_validate(e) for e in entries],
    )

# Fin del archivo paywall/modules/ledger/routes/owner_ledger_routes.py
