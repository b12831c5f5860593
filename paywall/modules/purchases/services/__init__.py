# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/services/__init__.py
"""

from .purchase_state_machine import PurchaseStateMachine, TransitionResult

__all__ = ["PurchaseStateMachine", "TransitionResult"]

# Fin del archivo paywall/modules/purchases/services/__init__.py
