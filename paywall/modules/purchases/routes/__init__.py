# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/routes/__init__.py
"""

from .checkout_routes import router as checkout_router
from .webhook_routes import router as webhook_router

__all__ = ["checkout_router", "webhook_router"]

# Fin del archivo paywall/modules/purchases/routes/__init__.py
