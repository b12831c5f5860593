# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/adapters/square_gateway.py

Cliente del gateway de pagos (Square Payments API).

- PaymentGatewayClient: interfaz que consume el motor (Protocol).
- SquareGatewayClient: implementación sobre httpx.AsyncClient con timeout
  explícito y reintentos acotados. El idempotency_key de Square se deriva
  del purchase_id (máx. 45 chars), así un reintento nunca cobra dos veces.

Cualquier timeout, error de transporte o respuesta irreconocible se
convierte en GatewayError; el llamador decide marcar la compra como fallida.

Autor: Equipo Paywall
Fecha: 2026-02-13
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Dict, Optional, Protocol
from uuid import UUID

import httpx

from paywall.shared.errors import GatewayError
from paywall.shared.utils.http_retry_utils import retry_with_backoff

logger = logging.getLogger(__name__)

SQUARE_API_VERSION = "2024-01-18"
IDEMPOTENCY_KEY_MAX_LEN = 45


class GatewayPaymentStatus(StrEnum):
    APPROVED = "APPROVED"
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"
    FAILED = "FAILED"


FAILURE_STATUSES = frozenset({GatewayPaymentStatus.FAILED, GatewayPaymentStatus.CANCELED})


@dataclass(frozen=True)
class GatewayConfirmation:
    """Resultado de un cobro según el gateway."""

    provider_payment_id: str
    status: str
    customer_id: Optional[str] = None
    processing_fee_cents: Optional[int] = None

    @property
    def is_success(self) -> bool:
        return self.status == GatewayPaymentStatus.COMPLETED

    @property
    def is_failure(self) -> bool:
        return self.status in FAILURE_STATUSES


class PaymentGatewayClient(Protocol):
    async def confirm_payment(
        self,
        purchase_id: UUID,
        source_id: str,
        amount_cents: int,
        currency: str,
    ) -> GatewayConfirmation:
        ...

    async def aclose(self) -> None:
        ...


def idempotency_key_for(purchase_id: UUID) -> str:
    return str(purchase_id)[:IDEMPOTENCY_KEY_MAX_LEN]


def extract_processing_fee_cents(payment: Dict[str, Any]) -> Optional[int]:
    """
    Comisión real reportada por Square para un pago.

    Square la reporta como lista `processing_fee` de {amount_money: {amount}};
    se suman todas. Sin lista (pago aún no liquidado) devuelve None.
    """
    fees = payment.get("processing_fee")
    if not fees:
        return None
    total = 0
    for fee in fees:
        money = fee.get("amount_money") or {}
        amount = money.get("amount")
        if amount is None:
            continue
        total += int(amount)
    return total


def parse_payment(payment: Dict[str, Any]) -> GatewayConfirmation:
    payment_id = payment.get("id")
    status = payment.get("status")
    if not payment_id or not status:
        raise GatewayError("Unrecognized payment payload from gateway")
    return GatewayConfirmation(
        provider_payment_id=payment_id,
        status=status,
        customer_id=payment.get("customer_id"),
        processing_fee_cents=extract_processing_fee_cents(payment),
    )


class SquareGatewayClient:
    """Implementación de PaymentGatewayClient contra Square."""

    def __init__(
        self,
        *,
        access_token: Optional[str],
        location_id: Optional[str],
        base_url: str,
        timeout_seconds: float = 10.0,
        max_retries: int = 2,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.access_token = access_token
        self.location_id = location_id
        self.max_retries = max_retries
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout_seconds),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Square-Version": SQUARE_API_VERSION,
            "Content-Type": "application/json",
        }

    async def confirm_payment(
        self,
        purchase_id: UUID,
        source_id: str,
        amount_cents: int,
        currency: str,
    ) -> GatewayConfirmation:
        if not self.access_token or not self.location_id:
            raise GatewayError("Payment gateway is not configured")

        body = {
            "source_id": source_id,
            "idempotency_key": idempotency_key_for(purchase_id),
            "amount_money": {"amount": amount_cents, "currency": currency},
            "location_id": self.location_id,
            "reference_id": str(purchase_id),
            "autocomplete": True,
        }

        try:
            response = await retry_with_backoff(
                lambda: self._client.post("/v2/payments", json=body, headers=self._headers()),
                max_retries=self.max_retries,
            )
        except httpx.TimeoutException as e:
            logger.error("gateway_timeout purchase_id=%s", purchase_id)
            raise GatewayError("Payment gateway timed out", retryable=True) from e
        except httpx.TransportError as e:
            logger.error("gateway_transport_error purchase_id=%s error=%s", purchase_id, type(e).__name__)
            raise GatewayError("Payment gateway unreachable", retryable=True) from e

        try:
            data = response.json()
        except ValueError as e:
            raise GatewayError(
                "Unrecognized response from gateway",
                status_code=response.status_code,
                retryable=response.status_code >= 500,
            ) from e

        # Un rechazo de tarjeta llega como 4xx con el pago en estado FAILED
        payment = data.get("payment") if isinstance(data, dict) else None
        if payment:
            confirmation = parse_payment(payment)
            logger.info(
                "gateway_payment purchase_id=%s provider_payment_id=%s status=%s http_status=%d",
                purchase_id, confirmation.provider_payment_id, confirmation.status, response.status_code,
            )
            return confirmation

        errors = data.get("errors") if isinstance(data, dict) else None
        codes = ",".join(str(err.get("code")) for err in errors or [] if isinstance(err, dict))
        logger.warning(
            "gateway_payment_rejected purchase_id=%s http_status=%d codes=%s",
            purchase_id, response.status_code, codes or "none",
        )
        raise GatewayError(
            f"Payment gateway rejected the request ({codes or response.status_code})",
            status_code=response.status_code,
            retryable=response.status_code >= 500,
        )


__all__ = [
    "GatewayConfirmation",
    "GatewayPaymentStatus",
    "PaymentGatewayClient",
    "SquareGatewayClient",
    "extract_processing_fee_cents",
    "idempotency_key_for",
    "parse_payment",
]

# Fin del archivo paywall/modules/purchases/adapters/square_gateway.py
