# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/repositories/__init__.py
"""

from .purchase_repository import PurchaseRepository

__all__ = ["PurchaseRepository"]

# Fin del archivo paywall/modules/purchases/repositories/__init__.py
