# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/facades/checkout/__init__.py
"""

from .start_checkout import CheckoutResult, build_checkout_url, create_checkout
from .confirm_payment import confirm_payment

__all__ = ["CheckoutResult", "build_checkout_url", "create_checkout", "confirm_payment"]

# Fin del archivo paywall/modules/purchases/facades/checkout/__init__.py
