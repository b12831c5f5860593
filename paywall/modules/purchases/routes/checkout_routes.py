# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/routes/checkout_routes.py

Rutas públicas de compra:
- POST /public/games/{game_id}/checkout       → crea la compra (created)
- POST /public/purchases/{purchase_id}/process → confirma el pago (síncrono)
- GET  /public/purchases/{purchase_id}/status  → estado + token si está pagada

Autor: Equipo Paywall
Fecha: 2026-02-14
"""

from __future__ import annotations

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, status
from sqlalchemy.ext.asyncio import AsyncSession

from paywall.core.container import PaywallEngine, get_engine
from paywall.shared.database import get_db
from paywall.modules.purchases.facades import confirm_payment, create_checkout, get_status
from paywall.modules.purchases.schemas import (
    CheckoutRequest,
    CheckoutResponse,
    ProcessPaymentRequest,
    ProcessPaymentResponse,
    PurchaseStatusResponse,
)

router = APIRouter(prefix="/public", tags=["checkout"])


@router.post(
    "/games/{game_id}/checkout",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
)
async def start_checkout(
    game_id: UUID,
    payload: CheckoutRequest,
    db: AsyncSession = Depends(get_db),
    engine: PaywallEngine = Depends(get_engine),
) -> CheckoutResponse:
    result = await create_checkout(
        db,
        engine,
        game_id=game_id,
        email=str(payload.email),
        phone=payload.phone,
        coupon_code=payload.coupon_code,
        return_url=payload.return_url,
    )
    return CheckoutResponse(
        purchase_id=result.purchase_id,
        checkout_url=result.checkout_url,
        amount_cents=result.amount_cents,
        original_amount_cents=result.original_amount_cents,
        discount_cents=result.discount_cents,
        currency=result.currency,
    )


@router.post("/purchases/{purchase_id}/process", response_model=ProcessPaymentResponse)
async def process_payment(
    purchase_id: UUID,
    payload: ProcessPaymentRequest,
    idempotency_key: Annotated[Optional[str], Header(max_length=255)] = None,
    db: AsyncSession = Depends(get_db),
    engine: PaywallEngine = Depends(get_engine),
) -> ProcessPaymentResponse:
    response = await confirm_payment(
        db,
        engine,
        purchase_id=purchase_id,
        source_id=payload.source_id,
        idempotency_key=idempotency_key,
    )
    return ProcessPaymentResponse(**response)


@router.get("/purchases/{purchase_id}/status", response_model=PurchaseStatusResponse)
async def purchase_status(
    purchase_id: UUID,
    db: AsyncSession = Depends(get_db),
    engine: PaywallEngine = Depends(get_engine),
) -> PurchaseStatusResponse:
    return PurchaseStatusResponse(**await get_status(db, engine, purchase_id))


# Fin del archivo paywall/modules/purchases/routes/checkout_routes.py
