# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/facades/checkout/start_checkout.py

Inicio de checkout: crea la compra en estado created y arma la URL del
checkout del frontend (Square Web Payments SDK).

Reglas:
- El juego debe existir y estar en active/live; si no -> NotFoundError.
- El espectador se busca/crea por email en minúsculas; si llega teléfono
  y no tenía, se completa.
- Si llega cupón se valida contra el contexto de la compra; un rechazo
  -> ValidationFailedError con la razón legible.
- El reparto se calcula sobre el bruto con descuento. La comisión del
  procesador es el estimado; se reemplaza al confirmar el pago.

Autor: Equipo Paywall
Fecha: 2026-02-14
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional
from urllib.parse import quote
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from paywall.shared.errors import NotFoundError, ValidationFailedError
from paywall.modules.catalog.enums import PURCHASABLE_GAME_STATES
from paywall.modules.coupons.services import CouponContext
from paywall.modules.purchases.enums import PurchaseStatus

if TYPE_CHECKING:
    from paywall.core.container import PaywallEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutResult:
    purchase_id: UUID
    checkout_url: str
    amount_cents: int
    original_amount_cents: int
    discount_cents: int
    currency: str


def build_checkout_url(
    app_url: str,
    purchase_id: UUID,
    email: str,
    return_url: str,
) -> str:
    base = app_url.rstrip("/")
    return (
        f"{base}/checkout/{purchase_id}?square_checkout=true"
        f"&email={quote(email, safe='')}&returnUrl={quote(return_url, safe='')}"
    )


def resolve_return_url(app_url: str, path_template: str, purchase_id: UUID, requested: Optional[str]) -> str:
    """URL de retorno pedida si pertenece al frontend; si no, la plantilla por defecto."""
    base = app_url.rstrip("/")
    if requested and (requested == base or requested.startswith(base + "/")):
        return requested
    if requested:
        logger.info("checkout_return_url_rejected purchase_id=%s", purchase_id)
    return base + path_template.format(purchase_id=purchase_id)


async def create_checkout(
    session: AsyncSession,
    engine: "PaywallEngine",
    *,
    game_id: UUID,
    email: str,
    phone: Optional[str] = None,
    coupon_code: Optional[str] = None,
    return_url: Optional[str] = None,
) -> CheckoutResult:
    game = await engine.game_repo.get(session, game_id)
    if game is None:
        raise NotFoundError("Game", game_id)
    if game.state not in PURCHASABLE_GAME_STATES:
        logger.info("checkout_game_unavailable game_id=%s state=%s", game_id, game.state)
        raise NotFoundError("Game", game_id)

    owner = await engine.owner_repo.get(session, game.owner_account_id)
    if owner is None:
        raise NotFoundError("Owner account", game.owner_account_id)

    viewer = await engine.viewer_repo.find_or_create(session, email, phone)

    original_amount = game.price_cents
    discount = 0
    coupon_id: Optional[UUID] = None
    if coupon_code:
        validation = await engine.coupons.validate(
            session,
            coupon_code,
            CouponContext(
                game_id=game.id,
                owner_account_id=owner.id,
                amount_cents=original_amount,
                viewer_id=viewer.id,
            ),
        )
        if not validation.valid or validation.coupon is None:
            raise ValidationFailedError(
                validation.error or "Invalid coupon",
                reason_code=str(validation.reason_code) if validation.reason_code else None,
            )
        discount = validation.discount_cents or 0
        coupon_id = validation.coupon.id

    amount = original_amount - discount
    split = engine.state_machine.compute_split(amount)

    purchase = await engine.purchase_repo.create(
        session,
        game_id=game.id,
        viewer_id=viewer.id,
        recipient_owner_account_id=owner.id,
        amount_cents=amount,
        original_amount_cents=original_amount,
        discount_cents=discount,
        coupon_code_id=coupon_id,
        currency=game.currency or engine.payments_settings.default_currency,
        platform_fee_cents=split.platform_fee_cents,
        processor_fee_cents=split.processor_fee_cents,
        owner_net_cents=split.owner_net_cents,
        status=PurchaseStatus.CREATED,
    )
    await session.commit()

    app_url = engine.settings.app_url
    final_return_url = resolve_return_url(
        app_url, engine.payments_settings.checkout_return_path, purchase.id, return_url
    )
    checkout_url = build_checkout_url(app_url, purchase.id, viewer.email, final_return_url)

    logger.info(
        "checkout_created purchase_id=%s game_id=%s viewer_id=%s amount_cents=%d discount_cents=%d",
        purchase.id, game.id, viewer.id, amount, discount,
    )
    return CheckoutResult(
        purchase_id=purchase.id,
        checkout_url=checkout_url,
        amount_cents=amount,
        original_amount_cents=original_amount,
        discount_cents=discount,
        currency=purchase.currency,
    )


__all__ = ["CheckoutResult", "create_checkout", "build_checkout_url", "resolve_return_url"]

# Fin del archivo paywall/modules/purchases/facades/checkout/start_checkout.py
