# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/facades/webhooks/__init__.py
"""

from .normalize import NormalizedWebhook, WebhookNormalizationError, normalize_square_webhook
from .handler import WebhookOutcome, WebhookOutcomeStatus, WebhookProcessor

__all__ = [
    "NormalizedWebhook",
    "WebhookNormalizationError",
    "normalize_square_webhook",
    "WebhookOutcome",
    "WebhookOutcomeStatus",
    "WebhookProcessor",
]

# Fin del archivo paywall/modules/purchases/facades/webhooks/__init__.py
