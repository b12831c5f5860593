# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/facades/webhooks/handler.py

WebhookProcessor: orquesta el motor ante eventos del gateway.

Flujo de process(session, event):
1. Normaliza el payload (malformado -> ValidationFailedError).
2. Pasa por IdempotencyGuard con clave webhook:{event_type}:{event_id};
   una redelivery devuelve el resultado cacheado marcado "duplicate".
3. payment.created/updated:
   - compra no encontrada por provider payment id -> ignored
   - COMPLETED: ya no está en created -> ignored; si no, mark_paid
     (la comisión reportada por Square es la autoritativa). Si la compra
     estaba failed el cobro existe sin acceso: alerta de conciliación.
   - FAILED/CANCELED: mark_failed
   - otro estado -> ignored
4. refund.created/updated: mark_refunded con el monto y el id del refund;
   un refund FAILED/REJECTED -> ignored; si ese refund_id ya se había
   posteado en el ledger -> alerta de conciliación (no se revierte solo).
5. Tipos desconocidos -> ignored.

El commit ocurre dentro de la operación protegida, antes de cachear la
respuesta: una clave marcada como procesada implica cambios persistidos.

Autor: Equipo Paywall
Fecha: 2026-02-14
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Dict, Mapping, Optional, Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from paywall.shared.idempotency import IdempotencyGuard, derive_key
from paywall.observability.prom import RECONCILIATION_ALERTS_TOTAL, WEBHOOKS_TOTAL
from paywall.modules.purchases.adapters import GatewayConfirmation, GatewayPaymentStatus
from paywall.modules.purchases.enums import PurchaseStatus
from paywall.modules.purchases.models import Purchase
from paywall.modules.purchases.repositories import PurchaseRepository
from paywall.modules.purchases.services import PurchaseStateMachine
from .normalize import NormalizedWebhook, normalize_square_webhook

logger = logging.getLogger(__name__)

IGNORED_REFUND_STATUSES = frozenset({"FAILED", "REJECTED"})


class WebhookOutcomeStatus(StrEnum):
    PROCESSED = "processed"
    IGNORED = "ignored"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class WebhookOutcome:
    status: WebhookOutcomeStatus
    reason: str
    purchase_id: Optional[UUID] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "reason": self.reason,
            "purchase_id": str(self.purchase_id) if self.purchase_id else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WebhookOutcome":
        purchase_id = data.get("purchase_id")
        return cls(
            status=WebhookOutcomeStatus(data["status"]),
            reason=data.get("reason", ""),
            purchase_id=UUID(purchase_id) if purchase_id else None,
        )


def _ignored(reason: str, purchase: Optional[Purchase] = None) -> WebhookOutcome:
    return WebhookOutcome(
        WebhookOutcomeStatus.IGNORED, reason, purchase.id if purchase is not None else None
    )


class WebhookProcessor:
    """Procesa eventos del gateway exactamente una vez por (tipo, event_id)."""

    def __init__(
        self,
        purchase_repo: PurchaseRepository,
        state_machine: PurchaseStateMachine,
        guard: IdempotencyGuard,
    ) -> None:
        self.purchase_repo = purchase_repo
        self.state_machine = state_machine
        self.guard = guard

    async def process(
        self,
        session: AsyncSession,
        event: Union[NormalizedWebhook, bytes, str, Mapping[str, Any]],
    ) -> WebhookOutcome:
        webhook = event if isinstance(event, NormalizedWebhook) else normalize_square_webhook(event)
        key = derive_key("webhook", webhook.event_type, webhook.event_id)

        async def _operation() -> Dict[str, Any]:
            try:
                outcome = await self._dispatch(session, webhook)
                await session.commit()
            except BaseException:
                await session.rollback()
                raise
            return outcome.to_dict()

        result = await self.guard.run(key, _operation)
        outcome = WebhookOutcome.from_dict(result.response)
        if result.replayed:
            outcome = WebhookOutcome(
                WebhookOutcomeStatus.DUPLICATE,
                f"Event already handled ({outcome.status.value})",
                outcome.purchase_id,
            )

        WEBHOOKS_TOTAL.labels(webhook.event_type, outcome.status.value).inc()
        logger.info(
            "webhook_handled event_type=%s event_id=%s outcome=%s reason=%s purchase_id=%s",
            webhook.event_type, webhook.event_id, outcome.status, outcome.reason, outcome.purchase_id,
        )
        return outcome

    # ---------------------------------------------------------
    # Despacho por tipo
    # ---------------------------------------------------------
    async def _dispatch(self, session: AsyncSession, webhook: NormalizedWebhook) -> WebhookOutcome:
        if webhook.is_payment_event:
            return await self._handle_payment(session, webhook)
        if webhook.is_refund_event:
            return await self._handle_refund(session, webhook)
        return _ignored(f"Unhandled event type {webhook.event_type}")

    async def _find_purchase(self, session: AsyncSession, webhook: NormalizedWebhook) -> Optional[Purchase]:
        purchase = None
        if webhook.provider_payment_id:
            purchase = await self.purchase_repo.get_by_provider_payment_id(
                session, webhook.provider_payment_id
            )
        if purchase is not None or not webhook.reference_id or not webhook.is_payment_event:
            return purchase

        # El confirm síncrono pudo no llegar a guardar el provider id:
        # Square devuelve el purchase_id que enviamos como reference_id
        try:
            purchase_id = UUID(webhook.reference_id)
        except ValueError:
            return None
        candidate = await self.purchase_repo.get(session, purchase_id)
        if candidate is None or candidate.payment_provider_payment_id not in (None, webhook.provider_payment_id):
            return None
        return candidate

    async def _handle_payment(self, session: AsyncSession, webhook: NormalizedWebhook) -> WebhookOutcome:
        purchase = await self._find_purchase(session, webhook)
        if purchase is None:
            logger.info(
                "webhook_purchase_not_found event_id=%s provider_payment_id=%s",
                webhook.event_id, webhook.provider_payment_id,
            )
            return _ignored("No purchase for provider payment")

        status = webhook.payment_status
        if status == GatewayPaymentStatus.COMPLETED:
            if purchase.status == PurchaseStatus.FAILED:
                RECONCILIATION_ALERTS_TOTAL.labels("paid_after_failure").inc()
                logger.critical(
                    "webhook_payment_completed_for_failed_purchase purchase_id=%s provider_payment_id=%s "
                    "event_id=%s failure_reason=%s",
                    purchase.id, webhook.provider_payment_id, webhook.event_id, purchase.failure_reason,
                )
                return _ignored("Payment completed for failed purchase; needs reconciliation", purchase)
            if purchase.status != PurchaseStatus.CREATED:
                return _ignored(f"Purchase already {purchase.status}", purchase)
            confirmation = GatewayConfirmation(
                provider_payment_id=webhook.provider_payment_id or "",
                status=status,
                customer_id=webhook.customer_id,
                processing_fee_cents=webhook.processing_fee_cents,
            )
            await self.state_machine.mark_paid(session, purchase, confirmation)
            return WebhookOutcome(WebhookOutcomeStatus.PROCESSED, "Purchase marked paid", purchase.id)

        if status in (GatewayPaymentStatus.FAILED, GatewayPaymentStatus.CANCELED):
            if purchase.status != PurchaseStatus.CREATED:
                logger.info(
                    "webhook_stale_failure purchase_id=%s purchase_status=%s payment_status=%s",
                    purchase.id, purchase.status, status,
                )
                return _ignored(f"Purchase already {purchase.status}", purchase)
            await self.state_machine.mark_failed(
                session,
                purchase,
                reason=f"Payment {status.lower()} by gateway",
                provider_payment_id=webhook.provider_payment_id,
            )
            return WebhookOutcome(WebhookOutcomeStatus.PROCESSED, "Purchase marked failed", purchase.id)

        return _ignored(f"Payment status {status} is not actionable", purchase)

    async def _handle_refund(self, session: AsyncSession, webhook: NormalizedWebhook) -> WebhookOutcome:
        if webhook.refund_status in IGNORED_REFUND_STATUSES:
            return await self._handle_failed_refund(session, webhook)

        purchase = await self._find_purchase(session, webhook)
        if purchase is None:
            logger.info(
                "webhook_purchase_not_found event_id=%s provider_payment_id=%s refund_id=%s",
                webhook.event_id, webhook.provider_payment_id, webhook.provider_refund_id,
            )
            return _ignored("No purchase for refunded payment")

        result = await self.state_machine.mark_refunded(
            session,
            purchase,
            refund_amount_cents=webhook.refund_amount_cents or 0,
            refund_id=webhook.provider_refund_id or "",
        )
        if result.ledger is None:
            return _ignored("Refund already recorded", purchase)
        return WebhookOutcome(WebhookOutcomeStatus.PROCESSED, "Refund recorded", purchase.id)

    async def _handle_failed_refund(self, session: AsyncSession, webhook: NormalizedWebhook) -> WebhookOutcome:
        refund_id = webhook.provider_refund_id
        if not refund_id or not await self.state_machine.ledger.is_refund_posted(session, refund_id):
            return _ignored(f"Refund status {webhook.refund_status}")

        purchase = await self._find_purchase(session, webhook)
        RECONCILIATION_ALERTS_TOTAL.labels("refund_failed_after_posting").inc()
        logger.error(
            "webhook_refund_failed_after_posting refund_id=%s refund_status=%s purchase_id=%s "
            "provider_payment_id=%s event_id=%s",
            refund_id, webhook.refund_status, purchase.id if purchase is not None else None,
            webhook.provider_payment_id, webhook.event_id,
        )
        return _ignored("Refund failed after posting; needs reconciliation", purchase)


__all__ = ["WebhookProcessor", "WebhookOutcome", "WebhookOutcomeStatus"]

# Fin del archivo paywall/modules/purchases/facades/webhooks/handler.py
