# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/schemas/__init__.py

Esquemas Pydantic de checkout, confirmación, estado y webhooks.
Los cuerpos de entrada aceptan snake_case y camelCase; las respuestas
son snake_case como el resto de la API.

Autor: Equipo Paywall
Fecha: 2026-02-14
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from paywall.modules.purchases.enums import PurchaseStatus


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CheckoutRequest(_CamelModel):
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=20, description="Teléfono E.164")
    coupon_code: Optional[str] = Field(default=None, max_length=32)
    return_url: Optional[str] = Field(default=None, max_length=2048)

    @field_validator("phone", "coupon_code", "return_url")
    @classmethod
    def _blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class CheckoutResponse(BaseModel):
    purchase_id: UUID
    checkout_url: str
    amount_cents: int
    original_amount_cents: int
    discount_cents: int
    currency: str


class ProcessPaymentRequest(_CamelModel):
    source_id: str = Field(min_length=1, max_length=512, description="Token de tarjeta/wallet del SDK")


class ProcessPaymentResponse(BaseModel):
    purchase_id: UUID
    status: PurchaseStatus
    entitlement_token: Optional[str] = None
    failure_reason: Optional[str] = None
    replayed: bool = False


class PurchaseStatusResponse(BaseModel):
    purchase_id: UUID
    status: PurchaseStatus
    entitlement_token: Optional[str] = None


class WebhookAck(BaseModel):
    status: str
    reason: str
    purchase_id: Optional[UUID] = None


__all__ = [
    "CheckoutRequest",
    "CheckoutResponse",
    "ProcessPaymentRequest",
    "ProcessPaymentResponse",
    "PurchaseStatusResponse",
    "WebhookAck",
]

# Fin del archivo paywall/modules/purchases/schemas/__init__.py
