# -*- coding: utf-8 -*-
"""
paywall/modules/coupons/schemas/__init__.py

Esquemas Pydantic del módulo de cupones.

- CouponValidateRequest / CouponValidateResponse: validación pública
- CouponCreate / CouponPatch: administración
- CouponOut / CouponDetailOut: lectura

Autor: Equipo Paywall
Fecha: 2026-02-08
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from paywall.modules.coupons.enums import CouponStatus, DiscountType


# =============================================================================
# VALIDACIÓN PÚBLICA
# =============================================================================

class CouponValidateRequest(BaseModel):
    code: str = Field(min_length=1, max_length=32)
    game_id: UUID
    email: Optional[EmailStr] = Field(
        default=None,
        description="Si se envía, se considera el historial de redenciones del espectador",
    )


class CouponValidateResponse(BaseModel):
    valid: bool
    discount_cents: Optional[int] = None
    final_amount_cents: Optional[int] = None
    error: Optional[str] = None
    reason_code: Optional[str] = None


# =============================================================================
# ADMINISTRACIÓN
# =============================================================================

class CouponCreate(BaseModel):
    code: str = Field(min_length=3, max_length=20)
    discount_type: DiscountType
    discount_value: int = Field(gt=0)
    owner_account_id: Optional[UUID] = None
    game_id: Optional[UUID] = None
    max_uses: Optional[int] = Field(default=None, ge=1)
    max_uses_per_viewer: int = Field(default=1, ge=1)
    min_purchase_cents: Optional[int] = Field(default=None, ge=0)
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None

    @field_validator("code")
    @classmethod
    def _normalize_code(cls, v: str) -> str:
        code = v.strip().upper()
        if not code.isalnum() or not code.isascii():
            raise ValueError("code must contain only letters and digits")
        return code

    @model_validator(mode="after")
    def _check_ranges(self) -> "CouponCreate":
        if self.discount_type == DiscountType.PERCENTAGE and self.discount_value > 100:
            raise ValueError("percentage discount must be between 1 and 100")
        if self.valid_from and self.valid_to and self.valid_to < self.valid_from:
            raise ValueError("valid_to must be after valid_from")
        return self


class CouponPatch(BaseModel):
    """
    Campos mutables de un cupón. Solo se aplican los presentes en el body;
    un null explícito en max_uses/valid_to significa "sin límite".
    Los campos extra se conservan para rechazarlos como inmutables.
    """

    model_config = ConfigDict(extra="allow")

    status: Optional[CouponStatus] = None
    max_uses: Optional[int] = Field(default=None, ge=1)
    valid_to: Optional[datetime] = None


# =============================================================================
# LECTURA
# =============================================================================

class CouponOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str
    discount_type: DiscountType
    discount_value: int
    owner_account_id: Optional[UUID] = None
    game_id: Optional[UUID] = None
    max_uses: Optional[int] = None
    max_uses_per_viewer: int
    min_purchase_cents: Optional[int] = None
    valid_from: datetime
    valid_to: Optional[datetime] = None
    status: CouponStatus
    used_count: int
    created_at: datetime


class CouponRedemptionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    purchase_id: UUID
    viewer_id: UUID
    discount_cents: int
    created_at: datetime


class CouponDetailOut(CouponOut):
    redemptions: List[CouponRedemptionOut] = Field(default_factory=list)


__all__ = [
    "CouponValidateRequest",
    "CouponValidateResponse",
    "CouponCreate",
    "CouponPatch",
    "CouponOut",
    "CouponRedemptionOut",
    "CouponDetailOut",
]

# Fin del archivo paywall/modules/coupons/schemas/__init__.py
