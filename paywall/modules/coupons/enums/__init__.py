# -*- coding: utf-8 -*-
"""
paywall/modules/coupons/enums/__init__.py

Enums del módulo de cupones.

Autor: Equipo Paywall
Fecha: 2026-02-08
"""

from enum import StrEnum


class DiscountType(StrEnum):
    PERCENTAGE = "percentage"
    FIXED_CENTS = "fixed_cents"

    __db_enum_name__ = "discount_type"


class CouponStatus(StrEnum):
    ACTIVE = "active"
    DISABLED = "disabled"

    __db_enum_name__ = "coupon_status"


class CouponRejectionReason(StrEnum):
    """Razones de rechazo en el orden en que se evalúan."""

    NOT_FOUND = "not_found"
    INACTIVE = "inactive"
    NOT_YET_VALID = "not_yet_valid"
    EXPIRED = "expired"
    USAGE_LIMIT_REACHED = "usage_limit_reached"
    ALREADY_USED = "already_used"
    WRONG_GAME = "wrong_game"
    WRONG_OWNER = "wrong_owner"
    BELOW_MINIMUM = "below_minimum"
    ALREADY_REDEEMED = "already_redeemed"


__all__ = ["DiscountType", "CouponStatus", "CouponRejectionReason"]

# Fin del archivo paywall/modules/coupons/enums/__init__.py
