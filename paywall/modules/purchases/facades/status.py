# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/facades/status.py

Consulta de estado de una compra para el polling del checkout.
El token de acceso solo se entrega mientras la compra está pagada.

Autor: Equipo Paywall
Fecha: 2026-02-14
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from paywall.shared.errors import NotFoundError
from paywall.modules.entitlements.enums import EntitlementStatus
from paywall.modules.purchases.enums import PurchaseStatus

if TYPE_CHECKING:
    from paywall.core.container import PaywallEngine


async def get_status(session: AsyncSession, engine: "PaywallEngine", purchase_id: UUID) -> Dict[str, Any]:
    purchase = await engine.purchase_repo.get(session, purchase_id)
    if purchase is None:
        raise NotFoundError("Purchase", purchase_id)

    token = None
    if purchase.status == PurchaseStatus.PAID:
        entitlement = await engine.entitlements.get_for_purchase(session, purchase.id)
        if entitlement is not None and entitlement.status == EntitlementStatus.ACTIVE:
            token = entitlement.token_id

    return {
        "purchase_id": str(purchase.id),
        "status": str(purchase.status),
        "entitlement_token": token,
    }


__all__ = ["get_status"]

# Fin del archivo paywall/modules/purchases/facades/status.py
