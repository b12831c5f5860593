# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/enums/__init__.py
"""

from .purchase_status_enum import PurchaseStatus
from .purchase_state_transitions import (
    VALID_PURCHASE_TRANSITIONS,
    is_valid_purchase_transition,
    get_allowed_purchase_transitions,
    validate_purchase_transition,
)

__all__ = [
    "PurchaseStatus",
    "VALID_PURCHASE_TRANSITIONS",
    "is_valid_purchase_transition",
    "get_allowed_purchase_transitions",
    "validate_purchase_transition",
]

# Fin del archivo paywall/modules/purchases/enums/__init__.py
