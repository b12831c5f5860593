# -*- coding: utf-8 -*-
"""
paywall/modules/coupons/routes/admin_coupon_routes.py

Administración de cupones (requiere token de servicio):
- POST  /admin/coupons
- GET   /admin/coupons
- GET   /admin/coupons/{coupon_id}
- PATCH /admin/coupons/{coupon_id}

Autor: Equipo Paywall
Fecha: 2026-02-08
"""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from paywall.core.container import PaywallEngine, get_engine
from paywall.shared.database import get_db
from paywall.shared.internal_auth import require_internal_service_token
from paywall.modules.coupons.enums import CouponStatus
from paywall.modules.coupons.schemas import (
    CouponCreate,
    CouponDetailOut,
    CouponOut,
    CouponPatch,
    CouponRedemptionOut,
)
from paywall.modules.coupons.services import CouponUpdate

router = APIRouter(
    prefix="/admin/coupons",
    tags=["admin:coupons"],
    dependencies=[Depends(require_internal_service_token)],
)


@router.post("", response_model=CouponOut, status_code=status.HTTP_201_CREATED)
async def create_coupon(
    payload: CouponCreate,
    db: AsyncSession = Depends(get_db),
    engine: PaywallEngine = Depends(get_engine),
) -> CouponOut:
    coupon = await engine.coupons.create_coupon(db, payload)
    await db.commit()
    return CouponOut.model_validate(coupon)


@router.get("", response_model=List[CouponOut])
async def list_coupons(
    status_filter: Optional[CouponStatus] = Query(default=None, alias="status"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
    engine: PaywallEngine = Depends(get_engine),
) -> List[CouponOut]:
    coupons = await engine.coupons.list_coupons(db, status=status_filter, limit=limit, offset=offset)
    return [CouponOut.model_validate(c) for c in coupons]


@router.get("/{coupon_id}", response_model=CouponDetailOut)
async def get_coupon(
    coupon_id: UUID,
    db: AsyncSession = Depends(get_db),
    engine: PaywallEngine = Depends(get_engine),
) -> CouponDetailOut:
    coupon, redemptions = await engine.coupons.get_coupon_detail(db, coupon_id)
    return CouponDetailOut(
        **CouponOut.model_validate(coupon).model_dump(),
        redemptions=[CouponRedemptionOut.model_validate(r) for r in redemptions],
    )


@router.patch("/{coupon_id}", response_model=CouponOut)
async def update_coupon(
    coupon_id: UUID,
    payload: CouponPatch,
    db: AsyncSession = Depends(get_db),
    engine: PaywallEngine = Depends(get_engine),
) -> CouponOut:
    # Solo los campos presentes en el body; los extra llegan para rechazarse
    fields = payload.model_dump(exclude_unset=True)
    fields.update(payload.model_extra or {})
    update = CouponUpdate.from_fields(fields)
    coupon = await engine.coupons.update_coupon(db, coupon_id, update)
    await db.commit()
    return CouponOut.model_validate(coupon)

# Fin del archivo paywall/modules/coupons/routes/admin_coupon_routes.py
