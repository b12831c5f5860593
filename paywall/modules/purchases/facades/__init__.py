# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/facades/__init__.py

Fachadas del motor de compras: checkout, confirmación, estado y webhooks.
"""

from .checkout import CheckoutResult, confirm_payment, create_checkout
from .status import get_status
from .webhooks import WebhookOutcome, WebhookOutcomeStatus, WebhookProcessor

__all__ = [
    "CheckoutResult",
    "confirm_payment",
    "create_checkout",
    "get_status",
    "WebhookOutcome",
    "WebhookOutcomeStatus",
    "WebhookProcessor",
]

# Fin del archivo paywall/modules/purchases/facades/__init__.py
