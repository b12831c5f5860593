# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/services/purchase_state_machine.py

PurchaseStateMachine: único componente que cambia el estado de una compra.

Transiciones (ver VALID_PURCHASE_TRANSITIONS):
    created → paid | failed
    paid    → refunded

Reglas de dominio:
1. Idempotencia: si la compra ya está en el estado destino es no-op
   (changed=False) y no se repiten efectos.
2. Cualquier otra transición fuera del mapa -> InvalidStateError.
3. Al pasar a paid, dentro de la misma transacción:
   - se recalcula el reparto con la comisión REAL reportada por el gateway
   - LedgerEngine.post_purchase (3 filas)
   - CouponEngine.apply si la compra lleva cupón
   - EntitlementIssuer.issue
   Todos esos efectos son idempotentes por sí mismos.
4. Cada transición relee la fila con bloqueo (FOR UPDATE) antes de validar.
5. Reembolsos: el acumulado nunca supera amount_cents. Un reembolso con
   refund_id nuevo sobre una compra ya reembolsada postea su propio
   movimiento en el ledger sin tocar el estado.

Autor: Equipo Paywall
Fecha: 2026-02-13
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from paywall.shared.config.settings_payments import PaymentsSettings
from paywall.shared.errors import (
    InvalidStateError,
    InvariantViolationError,
    ValidationFailedError,
)
from paywall.shared.utils.datetime_helpers import utcnow
from paywall.observability.prom import PURCHASE_TRANSITIONS_TOTAL
from paywall.modules.coupons.enums import CouponRejectionReason
from paywall.modules.coupons.services import CouponApplyResult, CouponService
from paywall.modules.entitlements.models import Entitlement
from paywall.modules.entitlements.services import EntitlementService
from paywall.modules.ledger.services import (
    LedgerPosting,
    LedgerService,
    MarketplaceSplit,
    calculate_marketplace_split,
)
from paywall.modules.purchases.adapters import GatewayConfirmation
from paywall.modules.purchases.enums import PurchaseStatus, validate_purchase_transition
from paywall.modules.purchases.models import Purchase
from paywall.modules.purchases.repositories import PurchaseRepository

logger = logging.getLogger(__name__)

FAILURE_REASON_MAX_LEN = 255


@dataclass(frozen=True)
class TransitionResult:
    purchase: Purchase
    changed: bool
    from_status: PurchaseStatus
    to_status: PurchaseStatus
    ledger: Optional[LedgerPosting] = None
    coupon: Optional[CouponApplyResult] = None
    entitlement: Optional[Entitlement] = None


class PurchaseStateMachine:
    """Transiciones de Purchase con sus efectos de ledger, cupón y entitlement."""

    def __init__(
        self,
        purchase_repo: PurchaseRepository,
        ledger: LedgerService,
        coupons: CouponService,
        entitlements: EntitlementService,
        payments_settings: PaymentsSettings,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.purchase_repo = purchase_repo
        self.ledger = ledger
        self.coupons = coupons
        self.entitlements = entitlements
        self.payments_settings = payments_settings
        self._clock = clock

    def compute_split(
        self,
        gross_amount_cents: int,
        reported_processor_fee_cents: Optional[int] = None,
    ) -> MarketplaceSplit:
        s = self.payments_settings
        return calculate_marketplace_split(
            gross_amount_cents,
            s.platform_fee_percent,
            reported_processor_fee_cents=reported_processor_fee_cents,
            processor_fee_percent=s.processor_fee_percent,
            processor_fee_fixed_cents=s.processor_fee_fixed_cents,
        )

    # ---------------------------------------------------------
    # created → paid
    # ---------------------------------------------------------
    async def mark_paid(
        self,
        session: AsyncSession,
        purchase: Purchase,
        confirmation: GatewayConfirmation,
    ) -> TransitionResult:
        if not confirmation.provider_payment_id:
            raise ValidationFailedError(
                "Payment confirmation requires a provider payment id",
                reason_code="missing_provider_payment_id",
            )
        if not confirmation.is_success:
            raise ValidationFailedError(
                f"Payment is not completed (status={confirmation.status})",
                reason_code="payment_not_completed",
            )

        purchase = await self._lock(session, purchase)
        from_status = purchase.status
        if from_status == PurchaseStatus.PAID:
            logger.info("purchase_transition_noop purchase_id=%s status=paid", purchase.id)
            return TransitionResult(purchase, False, from_status, PurchaseStatus.PAID)

        self._validate(purchase, PurchaseStatus.PAID)

        if (
            purchase.payment_provider_payment_id
            and purchase.payment_provider_payment_id != confirmation.provider_payment_id
        ):
            raise InvariantViolationError(
                "Confirmation refers to a different provider payment",
                purchase_id=purchase.id,
                stored=purchase.payment_provider_payment_id,
                received=confirmation.provider_payment_id,
            )

        split = self.compute_split(purchase.amount_cents, confirmation.processing_fee_cents)

        purchase.status = PurchaseStatus.PAID
        purchase.paid_at = self._clock()
        purchase.payment_provider_payment_id = confirmation.provider_payment_id
        if confirmation.customer_id:
            purchase.payment_provider_customer_id = confirmation.customer_id
        purchase.platform_fee_cents = split.platform_fee_cents
        purchase.processor_fee_cents = split.processor_fee_cents
        purchase.owner_net_cents = split.owner_net_cents
        await session.flush()

        posting = await self.ledger.post_purchase(session, purchase, split)

        coupon_result: Optional[CouponApplyResult] = None
        if purchase.coupon_code_id is not None:
            coupon_result = await self.coupons.apply(
                session,
                purchase.coupon_code_id,
                purchase.id,
                purchase.viewer_id,
                purchase.discount_cents,
            )
            if not coupon_result.applied and coupon_result.reason_code != CouponRejectionReason.ALREADY_REDEEMED:
                # El cobro ya ocurrió con el descuento; se registra y no se revierte
                logger.warning(
                    "purchase_coupon_not_redeemed purchase_id=%s coupon_id=%s reason=%s",
                    purchase.id, purchase.coupon_code_id, coupon_result.reason_code,
                )

        entitlement = await self.entitlements.issue(session, purchase)

        self._record(purchase, from_status, PurchaseStatus.PAID)
        logger.info(
            "purchase_paid purchase_id=%s amount_cents=%d platform_fee=%d processor_fee=%d "
            "owner_net=%d fee_estimated=%s",
            purchase.id, purchase.amount_cents, split.platform_fee_cents,
            split.processor_fee_cents, split.owner_net_cents, split.processor_fee_is_estimate,
        )
        return TransitionResult(
            purchase,
            True,
            from_status,
            PurchaseStatus.PAID,
            ledger=posting,
            coupon=coupon_result,
            entitlement=entitlement,
        )

    # ---------------------------------------------------------
    # created → failed
    # ---------------------------------------------------------
    async def mark_failed(
        self,
        session: AsyncSession,
        purchase: Purchase,
        reason: str,
        provider_payment_id: Optional[str] = None,
    ) -> TransitionResult:
        purchase = await self._lock(session, purchase)
        from_status = purchase.status
        if from_status == PurchaseStatus.FAILED:
            logger.info("purchase_transition_noop purchase_id=%s status=failed", purchase.id)
            return TransitionResult(purchase, False, from_status, PurchaseStatus.FAILED)

        self._validate(purchase, PurchaseStatus.FAILED)

        purchase.status = PurchaseStatus.FAILED
        purchase.failed_at = self._clock()
        purchase.failure_reason = (reason or "unknown")[:FAILURE_REASON_MAX_LEN]
        if provider_payment_id and not purchase.payment_provider_payment_id:
            purchase.payment_provider_payment_id = provider_payment_id
        await session.flush()

        self._record(purchase, from_status, PurchaseStatus.FAILED)
        logger.info("purchase_failed purchase_id=%s reason=%s", purchase.id, purchase.failure_reason)
        return TransitionResult(purchase, True, from_status, PurchaseStatus.FAILED)

    # ---------------------------------------------------------
    # paid → refunded
    # ---------------------------------------------------------
    async def mark_refunded(
        self,
        session: AsyncSession,
        purchase: Purchase,
        refund_amount_cents: int,
        refund_id: str,
    ) -> TransitionResult:
        if not refund_id:
            raise ValidationFailedError("Refund id is required", reason_code="missing_refund_id")
        if refund_amount_cents <= 0:
            raise ValidationFailedError(
                "Refund amount must be positive", reason_code="invalid_refund_amount"
            )

        purchase = await self._lock(session, purchase)
        from_status = purchase.status
        already_posted = await self.ledger.is_refund_posted(session, refund_id)
        if already_posted:
            logger.info(
                "purchase_refund_noop purchase_id=%s refund_id=%s status=%s",
                purchase.id, refund_id, from_status,
            )
            return TransitionResult(purchase, False, from_status, purchase.status)

        if from_status != PurchaseStatus.REFUNDED:
            self._validate(purchase, PurchaseStatus.REFUNDED)

        previously_refunded = purchase.refunded_amount_cents or 0
        if previously_refunded + refund_amount_cents > purchase.amount_cents:
            raise InvariantViolationError(
                "Cumulative refunds exceed purchase amount",
                purchase_id=purchase.id,
                refund_id=refund_id,
                previously_refunded=previously_refunded,
                refund_amount=refund_amount_cents,
                amount_cents=purchase.amount_cents,
            )

        posting = await self.ledger.post_refund(
            session,
            purchase,
            refund_amount_cents,
            refund_id,
            previously_refunded_cents=previously_refunded,
        )

        purchase.refunded_amount_cents = previously_refunded + refund_amount_cents
        changed = from_status != PurchaseStatus.REFUNDED
        if changed:
            purchase.status = PurchaseStatus.REFUNDED
            purchase.refunded_at = self._clock()
        await session.flush()

        if changed:
            self._record(purchase, from_status, PurchaseStatus.REFUNDED)
        logger.info(
            "purchase_refunded purchase_id=%s refund_id=%s amount=%d refunded_total=%d status_changed=%s",
            purchase.id, refund_id, refund_amount_cents, purchase.refunded_amount_cents, changed,
        )
        return TransitionResult(
            purchase, changed, from_status, PurchaseStatus.REFUNDED, ledger=posting
        )

    # ---------------------------------------------------------
    # Pagos aún no completados
    # ---------------------------------------------------------
    async def attach_provider_payment(
        self,
        session: AsyncSession,
        purchase: Purchase,
        provider_payment_id: str,
        customer_id: Optional[str] = None,
    ) -> Purchase:
        """
        Asocia el id de pago del gateway a una compra aún en created.

        Se usa cuando la confirmación síncrona devuelve APPROVED/PENDING: el
        webhook posterior encontrará la compra por ese id. No cambia estado.
        """
        purchase = await self._lock(session, purchase)
        if purchase.payment_provider_payment_id == provider_payment_id:
            return purchase
        if purchase.payment_provider_payment_id:
            raise InvariantViolationError(
                "Purchase is already linked to another provider payment",
                purchase_id=purchase.id,
                stored=purchase.payment_provider_payment_id,
                received=provider_payment_id,
            )
        purchase.payment_provider_payment_id = provider_payment_id
        if customer_id:
            purchase.payment_provider_customer_id = customer_id
        await session.flush()
        logger.info(
            "purchase_provider_payment_attached purchase_id=%s provider_payment_id=%s",
            purchase.id, provider_payment_id,
        )
        return purchase

    # ---------------------------------------------------------
    # Internos
    # ---------------------------------------------------------
    async def _lock(self, session: AsyncSession, purchase: Purchase) -> Purchase:
        """
        Relee la compra con FOR UPDATE antes de decidir la transición.

        El flush previo evita que populate_existing pise cambios pendientes;
        la fila releída refleja lo que otra transacción haya confirmado.
        """
        await session.flush()
        locked = await self.purchase_repo.get_for_update(session, purchase.id)
        if locked is None:
            raise InvariantViolationError("Purchase row disappeared during transition", purchase_id=purchase.id)
        return locked

    @staticmethod
    def _validate(purchase: Purchase, to_status: PurchaseStatus) -> None:
        try:
            validate_purchase_transition(purchase.status, to_status)
        except InvalidStateError:
            logger.warning(
                "purchase_transition_rejected purchase_id=%s from=%s to=%s",
                purchase.id, purchase.status, to_status,
            )
            raise

    @staticmethod
    def _record(purchase: Purchase, from_status: PurchaseStatus, to_status: PurchaseStatus) -> None:
        PURCHASE_TRANSITIONS_TOTAL.labels(str(from_status), str(to_status)).inc()
        logger.info(
            "purchase_transition purchase_id=%s from=%s to=%s",
            purchase.id, from_status, to_status,
        )


__all__ = ["PurchaseStateMachine", "TransitionResult"]

# Fin del archivo paywall/modules/purchases/services/purchase_state_machine.py
