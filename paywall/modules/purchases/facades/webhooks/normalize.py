# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/facades/webhooks/normalize.py

Normalización de payloads de webhooks de Square.

Convierte el evento crudo a un DTO interno (NormalizedWebhook) para que
el procesador no dependa de la forma exacta del proveedor. Se aceptan
claves snake_case (API de Square) y camelCase (SDKs / reenvíos).

Forma esperada:
    {
      "type": "payment.updated" | "refund.created" | ...,
      "event_id": "...",
      "data": {"object": {"payment": {...}} | {"refund": {...}}}
    }

Autor: Equipo Paywall
Fecha: 2026-02-14
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from paywall.shared.errors import ValidationFailedError

logger = logging.getLogger(__name__)

PAYMENT_EVENTS = frozenset({"payment.created", "payment.updated"})
REFUND_EVENTS = frozenset({"refund.created", "refund.updated"})


class WebhookNormalizationError(ValidationFailedError):
    """Payload de webhook mal formado."""

    def __init__(self, reason: str):
        super().__init__(reason, reason_code="malformed_webhook")


# =============================================================================
# FORMA CRUDA DE SQUARE
# =============================================================================

class _SquareModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class SquareMoney(_SquareModel):
    amount: int = Field(ge=0)
    currency: Optional[str] = None


class SquareProcessingFee(_SquareModel):
    amount_money: Optional[SquareMoney] = None


class SquarePayment(_SquareModel):
    id: str = Field(min_length=1)
    status: str = Field(min_length=1)
    customer_id: Optional[str] = None
    reference_id: Optional[str] = None
    amount_money: Optional[SquareMoney] = None
    processing_fee: Optional[List[SquareProcessingFee]] = None
    processing_fee_money: Optional[SquareMoney] = None


class SquareRefund(_SquareModel):
    id: str = Field(min_length=1)
    status: Optional[str] = None
    payment_id: str = Field(min_length=1)
    amount_money: SquareMoney


class SquareEventObject(_SquareModel):
    payment: Optional[SquarePayment] = None
    refund: Optional[SquareRefund] = None


class SquareEventData(_SquareModel):
    object: SquareEventObject = Field(default_factory=SquareEventObject)


class SquareEvent(_SquareModel):
    type: str = Field(min_length=1)
    event_id: str = Field(min_length=1)
    data: SquareEventData = Field(default_factory=SquareEventData)


# =============================================================================
# DTO INTERNO
# =============================================================================

class NormalizedWebhook(BaseModel):
    """DTO normalizado de un evento del gateway."""

    event_type: str = Field(description="Tipo de evento original del proveedor")
    event_id: str = Field(description="ID único del evento en el proveedor")

    provider_payment_id: Optional[str] = Field(
        default=None,
        description="ID del pago en el proveedor (en refunds: el pago reembolsado)",
    )
    payment_status: Optional[str] = Field(
        default=None,
        description="Estado del pago según el proveedor (COMPLETED, FAILED, ...)",
    )
    reference_id: Optional[str] = Field(
        default=None,
        description="reference_id enviado al crear el pago (purchase_id)",
    )
    customer_id: Optional[str] = Field(default=None, description="ID del cliente en el proveedor")
    processing_fee_cents: Optional[int] = Field(
        default=None,
        description="Comisión real del procesador en centavos (si ya se reporta)",
    )

    provider_refund_id: Optional[str] = Field(default=None, description="ID del refund en el proveedor")
    refund_status: Optional[str] = Field(default=None, description="Estado del refund")
    refund_amount_cents: Optional[int] = Field(default=None, description="Monto del reembolso en centavos")

    @property
    def is_payment_event(self) -> bool:
        return self.event_type in PAYMENT_EVENTS

    @property
    def is_refund_event(self) -> bool:
        return self.event_type in REFUND_EVENTS


def _processing_fee_cents(payment: SquarePayment) -> Optional[int]:
    if payment.processing_fee:
        amounts = [f.amount_money.amount for f in payment.processing_fee if f.amount_money is not None]
        if amounts:
            return sum(amounts)
    if payment.processing_fee_money is not None:
        return payment.processing_fee_money.amount
    return None


def _load(payload: Union[bytes, str, Mapping[str, Any]]) -> Dict[str, Any]:
    if isinstance(payload, (bytes, str)):
        try:
            data = json.loads(payload)
        except (ValueError, UnicodeDecodeError) as e:
            raise WebhookNormalizationError("Webhook body is not valid JSON") from e
    else:
        data = dict(payload)
    if not isinstance(data, dict):
        raise WebhookNormalizationError("Webhook body must be a JSON object")
    return data


def normalize_square_webhook(payload: Union[bytes, str, Mapping[str, Any]]) -> NormalizedWebhook:
    """
    Normaliza un evento de Square.

    Raises:
        WebhookNormalizationError: JSON inválido, campos requeridos ausentes o
            evento de pago/refund sin su objeto correspondiente.
    """
    data = _load(payload)
    try:
        event = SquareEvent.model_validate(data)
    except ValidationError as e:
        fields = ",".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        logger.warning("webhook_malformed fields=%s", fields)
        raise WebhookNormalizationError(f"Malformed webhook payload ({fields})") from e

    normalized = NormalizedWebhook(event_type=event.type, event_id=event.event_id)
    obj = event.data.object

    if normalized.is_payment_event:
        if obj.payment is None:
            raise WebhookNormalizationError(f"{event.type} event without payment object")
        payment = obj.payment
        normalized.provider_payment_id = payment.id
        normalized.payment_status = payment.status.upper()
        normalized.reference_id = payment.reference_id
        normalized.customer_id = payment.customer_id
        normalized.processing_fee_cents = _processing_fee_cents(payment)

    elif normalized.is_refund_event:
        if obj.refund is None:
            raise WebhookNormalizationError(f"{event.type} event without refund object")
        refund = obj.refund
        normalized.provider_payment_id = refund.payment_id
        normalized.provider_refund_id = refund.id
        normalized.refund_status = refund.status.upper() if refund.status else None
        normalized.refund_amount_cents = refund.amount_money.amount

    return normalized


__all__ = [
    "NormalizedWebhook",
    "WebhookNormalizationError",
    "normalize_square_webhook",
    "PAYMENT_EVENTS",
    "REFUND_EVENTS",
]

# Fin del archivo paywall/modules/purchases/facades/webhooks/normalize.py
