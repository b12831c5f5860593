# -*- coding: utf-8 -*-
"""
paywall/modules/coupons/models/__init__.py
"""

from .coupon_code_models import CouponCode
from .coupon_redemption_models import CouponRedemption

__all__ = ["CouponCode", "CouponRedemption"]

# Fin del archivo paywall/modules/coupons/models/__init__.py
