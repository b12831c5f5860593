# -*- coding: utf-8 -*-
"""
paywall/modules/coupons/services/__init__.py
"""

from .coupon_service import (
    CouponService,
    CouponContext,
    CouponValidationResult,
    CouponApplyResult,
    CouponUpdate,
    UNSET,
)

__all__ = [
    "CouponService",
    "CouponContext",
    "CouponValidationResult",
    "CouponApplyResult",
    "CouponUpdate",
    "UNSET",
]

# Fin del archivo paywall/modules/coupons/services/__init__.py
