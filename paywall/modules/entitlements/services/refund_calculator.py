# -*- coding: utf-8 -*-
"""
paywall/modules/entitlements/services/refund_calculator.py

Reembolso sugerido por calidad de reproducción (reglas v1.0).

Determinista y sin efectos: devuelve el reembolso más generoso que
aplica (no se acumulan). Mover dinero es responsabilidad del flujo de
reembolsos del gateway, no de este cálculo.

    100%  buffer_ratio > 20% | downtime_ratio > 20% | ≥3 fatales con < 5 min vistos
     50%  buffer_ratio > 10% | downtime_ratio > 10% | ≥1 fatal con < 2 min vistos
     25%  más de 10 eventos de buffering

Por debajo de 30 s de reproducción no hay reembolso.

Autor: Equipo Paywall
Fecha: 2026-02-10
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from paywall.shared.utils.money import floor_percent_of
from .telemetry import TelemetrySummary


@dataclass(frozen=True)
class RefundRuleConfig:
    full_refund_ratio: Decimal = Decimal("0.20")
    half_refund_ratio: Decimal = Decimal("0.10")
    excessive_buffering_events: int = 10
    partial_refund_percent: int = 25
    min_watch_ms: int = 30_000
    rule_version: str = "v1.0"


DEFAULT_REFUND_RULES = RefundRuleConfig()

# Duración esperada cuando el partido no tiene inicio y fin programados
DEFAULT_GAME_DURATION_MS = 90 * 60 * 1000


@dataclass(frozen=True)
class QualityRefund:
    amount_cents: int
    applied_rule: str
    rule_version: str


def _ratio(part: int, whole: int) -> Decimal:
    if whole <= 0:
        return Decimal(0)
    return Decimal(part) / Decimal(whole)


def calculate_quality_refund(
    purchase_amount_cents: int,
    summary: TelemetrySummary,
    expected_duration_ms: int = 0,
    config: RefundRuleConfig = DEFAULT_REFUND_RULES,
) -> Optional[QualityRefund]:
    if summary.total_watch_ms < config.min_watch_ms:
        return None

    buffer_ratio = _ratio(summary.total_buffer_ms, summary.total_watch_ms)
    downtime_ratio = _ratio(summary.stream_down_ms, expected_duration_ms)

    def refund(amount_cents: int, rule: str) -> QualityRefund:
        return QualityRefund(amount_cents=amount_cents, applied_rule=rule, rule_version=config.rule_version)

    # Reembolso total
    if buffer_ratio > config.full_refund_ratio:
        return refund(purchase_amount_cents, "full_refund_buffer_ratio_high")
    if downtime_ratio > config.full_refund_ratio:
        return refund(purchase_amount_cents, "full_refund_downtime_ratio_high")
    if summary.fatal_errors >= 3 and summary.total_watch_ms < 5 * 60 * 1000:
        return refund(purchase_amount_cents, "full_refund_fatal_errors_multiple")

    # Medio reembolso
    half = floor_percent_of(purchase_amount_cents, 50)
    if buffer_ratio > config.half_refund_ratio:
        return refund(half, "half_refund_buffer_ratio_medium")
    if downtime_ratio > config.half_refund_ratio:
        return refund(half, "half_refund_downtime_ratio_medium")
    if summary.fatal_errors >= 1 and summary.total_watch_ms < 2 * 60 * 1000:
        return refund(half, "half_refund_fatal_error_minimal_watch")

    # Parcial por interrupciones frecuentes
    if summary.buffer_events > config.excessive_buffering_events:
        return refund(
            floor_percent_of(purchase_amount_cents, config.partial_refund_percent),
            "partial_refund_excessive_buffering",
        )

    return None


__all__ = [
    "RefundRuleConfig",
    "DEFAULT_REFUND_RULES",
    "DEFAULT_GAME_DURATION_MS",
    "QualityRefund",
    "calculate_quality_refund",
]

# Fin del archivo paywall/modules/entitlements/services/refund_calculator.py
