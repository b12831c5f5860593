# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/facades/checkout/confirm_payment.py

Confirmación síncrona del pago desde el checkout (token de tarjeta /
wallet del Web Payments SDK).

Flujo:
1. IdempotencyGuard con clave confirm:{purchase_id}:{Idempotency-Key o source_id};
   un reintento del cliente reproduce la respuesta original.
2. La compra debe estar en created (si no -> InvalidStateError).
3. Cobro en el gateway (timeout + reintentos acotados):
   - COMPLETED          -> mark_paid (ledger, cupón, entitlement)
   - FAILED / CANCELED  -> mark_failed
   - APPROVED / PENDING -> se asocia el provider payment id; el webhook
                           posterior completa la transición
   - GatewayError       -> mark_failed (nunca queda colgada)

Autor: Equipo Paywall
Fecha: 2026-02-14
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from paywall.shared.errors import GatewayError, InvalidStateError, NotFoundError
from paywall.shared.idempotency import derive_key
from paywall.modules.entitlements.models import Entitlement
from paywall.modules.purchases.enums import PurchaseStatus
from paywall.modules.purchases.models import Purchase

if TYPE_CHECKING:
    from paywall.core.container import PaywallEngine

logger = logging.getLogger(__name__)


def _response(purchase: Purchase, entitlement: Optional[Entitlement]) -> Dict[str, Any]:
    return {
        "purchase_id": str(purchase.id),
        "status": str(purchase.status),
        "entitlement_token": entitlement.token_id if entitlement is not None else None,
        "failure_reason": purchase.failure_reason,
    }


async def confirm_payment(
    session: AsyncSession,
    engine: "PaywallEngine",
    *,
    purchase_id: UUID,
    source_id: str,
    idempotency_key: Optional[str] = None,
) -> Dict[str, Any]:
    key = derive_key("confirm", purchase_id, idempotency_key or source_id)

    async def _operation() -> Dict[str, Any]:
        try:
            response = await _confirm(session, engine, purchase_id, source_id)
            await session.commit()
        except BaseException:
            await session.rollback()
            raise
        return response

    result = await engine.idempotency.run(key, _operation)
    return {**result.response, "replayed": result.replayed}


async def _confirm(
    session: AsyncSession,
    engine: "PaywallEngine",
    purchase_id: UUID,
    source_id: str,
) -> Dict[str, Any]:
    purchase = await engine.purchase_repo.get_for_update(session, purchase_id)
    if purchase is None:
        raise NotFoundError("Purchase", purchase_id)
    if purchase.status != PurchaseStatus.CREATED:
        raise InvalidStateError(
            purchase.status,
            PurchaseStatus.PAID,
            f"Purchase is not awaiting payment (status={purchase.status})",
        )

    try:
        confirmation = await engine.gateway.confirm_payment(
            purchase.id, source_id, purchase.amount_cents, purchase.currency
        )
    except GatewayError as e:
        logger.warning(
            "confirm_gateway_error purchase_id=%s retryable=%s message=%s",
            purchase.id, e.retryable, e.message,
        )
        await engine.state_machine.mark_failed(session, purchase, reason=f"Gateway error: {e.message}")
        return _response(purchase, None)

    if confirmation.is_success:
        result = await engine.state_machine.mark_paid(session, purchase, confirmation)
        return _response(purchase, result.entitlement)

    if confirmation.is_failure:
        await engine.state_machine.mark_failed(
            session,
            purchase,
            reason=f"Payment {confirmation.status.lower()} by gateway",
            provider_payment_id=confirmation.provider_payment_id,
        )
        return _response(purchase, None)

    await engine.state_machine.attach_provider_payment(
        session, purchase, confirmation.provider_payment_id, confirmation.customer_id
    )
    logger.info(
        "confirm_pending purchase_id=%s provider_payment_id=%s gateway_status=%s",
        purchase.id, confirmation.provider_payment_id, confirmation.status,
    )
    return _response(purchase, None)


__all__ = ["confirm_payment"]

# Fin del archivo paywall/modules/purchases/facades/checkout/confirm_payment.py
