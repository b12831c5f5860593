# -*- coding: utf-8 -*-
"""
paywall/modules/coupons/routes/__init__.py
"""

from .public_coupon_routes import router as public_router
from .admin_coupon_routes import router as admin_router

__all__ = ["public_router", "admin_router"]

# Fin del archivo paywall/modules/coupons/routes/__init__.py
