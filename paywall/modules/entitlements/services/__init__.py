# -*- coding: utf-8 -*-
"""
paywall/modules/entitlements/services/__init__.py
"""

from .entitlement_service import EntitlementService, TokenValidationResult, generate_token
from .playback_session_service import PlaybackSessionService, PlaybackSessionStarted
from .refund_calculator import (
    DEFAULT_GAME_DURATION_MS,
    QualityRefund,
    RefundRuleConfig,
    calculate_quality_refund,
)
from .telemetry import TelemetryEvent, TelemetrySummary, aggregate_telemetry

__all__ = [
    "EntitlementService",
    "TokenValidationResult",
    "generate_token",
    "PlaybackSessionService",
    "PlaybackSessionStarted",
    "DEFAULT_GAME_DURATION_MS",
    "QualityRefund",
    "RefundRuleConfig",
    "calculate_quality_refund",
    "TelemetryEvent",
    "TelemetrySummary",
    "aggregate_telemetry",
]

# Fin del archivo paywall/modules/entitlements/services/__init__.py
