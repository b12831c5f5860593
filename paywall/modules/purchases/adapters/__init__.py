# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/adapters/__init__.py
"""

from .square_gateway import (
    GatewayConfirmation,
    GatewayPaymentStatus,
    PaymentGatewayClient,
    SquareGatewayClient,
)

__all__ = [
    "GatewayConfirmation",
    "GatewayPaymentStatus",
    "PaymentGatewayClient",
    "SquareGatewayClient",
]

# Fin del archivo paywall/modules/purchases/adapters/__init__.py
