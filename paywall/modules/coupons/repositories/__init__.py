# -*- coding: utf-8 -*-
"""
paywall/modules/coupons/repositories/__init__.py
"""

from .coupon_repository import CouponRepository, CouponRedemptionRepository, normalize_code

__all__ = ["CouponRepository", "CouponRedemptionRepository", "normalize_code"]

# Fin del archivo paywall/modules/coupons/repositories/__init__.py
