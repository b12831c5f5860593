# -*- coding: utf-8 -*-
"""
paywall/modules/coupons/routes/public_coupon_routes.py

Validación pública de cupones (previa al checkout):
- POST /public/coupons/validate

Un rechazo de regla de negocio responde 200 con valid=false y la razón;
solo un juego inexistente es 404.

Autor: Equipo Paywall
Fecha: 2026-02-08
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from paywall.core.container import PaywallEngine, get_engine
from paywall.shared.database import get_db
from paywall.shared.errors import NotFoundError
from paywall.modules.coupons.schemas import CouponValidateRequest, CouponValidateResponse
from paywall.modules.coupons.services import CouponContext

router = APIRouter(prefix="/public/coupons", tags=["coupons"])


@router.post("/validate", response_model=CouponValidateResponse)
async def validate_coupon(
    payload: CouponValidateRequest,
    db: AsyncSession = Depends(get_db),
    engine: PaywallEngine = Depends(get_engine),
) -> CouponValidateResponse:
    game = await engine.game_repo.get(db, payload.game_id)
    if game is None:
        raise NotFoundError("Game", payload.game_id)

    viewer_id = None
    if payload.email:
        viewer = await engine.viewer_repo.get_by_email(db, payload.email)
        viewer_id = viewer.id if viewer else None

    result = await engine.coupons.validate(
        db,
        payload.code,
        CouponContext(
            game_id=game.id,
            owner_account_id=game.owner_account_id,
            amount_cents=game.price_cents,
            viewer_id=viewer_id,
        ),
    )
    if not result.valid:
        return CouponValidateResponse(
            valid=False,
            error=result.error,
            reason_code=result.reason_code,
        )
    return CouponValidateResponse(
        valid=True,
        discount_cents=result.discount_cents,
        final_amount_cents=game.price_cents - (result.discount_cents or 0),
    )

# Fin del archivo paywall/modules/coupons/routes/public_coupon_routes.py
