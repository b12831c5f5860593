# -*- coding: utf-8 -*-
"""
Tests de las reglas de reembolso por calidad (v1.0).

Autor: Equipo Paywall
Fecha: 2026-02-17
"""

import pytest

from paywall.modules.entitlements.services import TelemetrySummary, calculate_quality_refund

MIN = 60 * 1000
HOUR = 60 * MIN


def _summary(watch, buffer=0, events=0, fatal=0, down=0):
    return TelemetrySummary(
        total_watch_ms=watch,
        total_buffer_ms=buffer,
        buffer_events=events,
        fatal_errors=fatal,
        stream_down_ms=down,
    )


class TestQualityRefund:
    def test_short_sessions_never_refund(self):
        # 20 s con todo el tiempo en buffering: por debajo del mínimo
        assert calculate_quality_refund(499, _summary(20_000, buffer=20_000, fatal=5)) is None

    def test_clean_session_has_no_refund(self):
        assert calculate_quality_refund(499, _summary(2 * HOUR, buffer=30_000, events=3), 3 * HOUR) is None

    @pytest.mark.parametrize(
        "summary, expected_ms, amount, rule",
        [
            (_summary(10 * MIN, buffer=150_000), 0, 499, "full_refund_buffer_ratio_high"),
            (_summary(1 * HOUR, down=45 * MIN), 3 * HOUR, 499, "full_refund_downtime_ratio_high"),
            (_summary(4 * MIN, fatal=3), 0, 499, "full_refund_fatal_errors_multiple"),
            (_summary(10 * MIN, buffer=90_000), 0, 249, "half_refund_buffer_ratio_medium"),
            (_summary(1 * HOUR, down=20 * MIN), 3 * HOUR, 249, "half_refund_downtime_ratio_medium"),
            (_summary(90_000, fatal=1), 0, 249, "half_refund_fatal_error_minimal_watch"),
            (_summary(1 * HOUR, buffer=60_000, events=11), 0, 124, "partial_refund_excessive_buffering"),
        ],
    )
    def test_rules(self, summary, expected_ms, amount, rule):
        refund = calculate_quality_refund(499, summary, expected_ms)

        assert refund is not None
        assert refund.amount_cents == amount
        assert refund.applied_rule == rule
        assert refund.rule_version == "v1.0"

    def test_most_generous_rule_wins(self):
        # Califica para 25% (eventos) y para 100% (ratio): gana el total
        refund = calculate_quality_refund(1000, _summary(10 * MIN, buffer=3 * MIN, events=20))
        assert refund.amount_cents == 1000

    def test_fatal_errors_after_long_watch_do_not_refund(self):
        assert calculate_quality_refund(499, _summary(30 * MIN, fatal=4)) is None

    def test_downtime_without_expected_duration_is_ignored(self):
        assert calculate_quality_refund(499, _summary(1 * HOUR, down=50 * MIN), 0) is None
