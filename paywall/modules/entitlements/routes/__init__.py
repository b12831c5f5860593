# -*- coding: utf-8 -*-
"""
paywall/modules/entitlements/routes/__init__.py
"""

from .watch_routes import router as watch_router
from .admin_entitlement_routes import router as admin_router

__all__ = ["watch_router", "admin_router"]

# Fin del archivo paywall/modules/entitlements/routes/__init__.py
