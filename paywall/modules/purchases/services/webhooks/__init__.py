# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/services/webhooks/__init__.py
"""

from .signature_verification import (
    SQUARE_SIGNATURE_HEADER,
    compute_square_signature,
    verify_square_signature,
)

__all__ = [
    "SQUARE_SIGNATURE_HEADER",
    "compute_square_signature",
    "verify_square_signature",
]
