# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/models/__init__.py
"""

from .purchase_models import Purchase

__all__ = ["Purchase"]

# Fin del archivo paywall/modules/purchases/models/__init__.py
