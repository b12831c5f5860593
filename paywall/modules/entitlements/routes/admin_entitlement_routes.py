# -*- coding: utf-8 -*-
"""
paywall/modules/entitlements/routes/admin_entitlement_routes.py

- POST /admin/entitlements/{entitlement_id}/revoke

La revocación es inmediata (el token no lleva claims) y cierra las
sesiones de reproducción activas.

Autor: Equipo Paywall
Fecha: 2026-02-10
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from paywall.core.container import PaywallEngine, get_engine
from paywall.shared.database import get_db
from paywall.shared.internal_auth import require_internal_service_token
from paywall.modules.entitlements.schemas import EntitlementOut, EntitlementRevokeResponse

router = APIRouter(
    prefix="/admin/entitlements",
    tags=["admin:entitlements"],
    dependencies=[Depends(require_internal_service_token)],
)


@router.post("/{entitlement_id}/revoke", response_model=EntitlementRevokeResponse)
async def revoke_entitlement(
    entitlement_id: UUID,
    db: AsyncSession = Depends(get_db),
    engine: PaywallEngine = Depends(get_engine),
) -> EntitlementRevokeResponse:
    entitlement = await engine.entitlements.revoke(db, entitlement_id)
    closed = await engine.playback.close_for_entitlement(db, entitlement_id)
    await db.commit()
    return EntitlementRevokeResponse(
        **EntitlementOut.model_validate(entitlement).model_dump(),
        closed_sessions=closed,
    )

# Fin del archivo paywall/modules/entitlements/routes/admin_entitlement_routes.py
