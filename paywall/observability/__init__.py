# -*- coding: utf-8 -*-
"""
paywall/observability/__init__.py

Métricas Prometheus del paywall.
"""

from .prom import (
    PURCHASE_TRANSITIONS_TOTAL,
    WEBHOOKS_TOTAL,
    setup_observability,
)

__all__ = ["PURCHASE_TRANSITIONS_TOTAL", "WEBHOOKS_TOTAL", "setup_observability"]
