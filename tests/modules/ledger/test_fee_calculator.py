# -*- coding: utf-8 -*-
"""
Tests del reparto marketplace (platform + processor + owner_net = gross).

Autor: Equipo Paywall
Fecha: 2026-02-17
"""

import logging

import pytest

from paywall.shared.errors import InvariantViolationError
from paywall.modules.ledger.services import MarketplaceSplit, calculate_marketplace_split


class TestMarketplaceSplit:
    def test_499_cents_with_estimated_processor_fee(self):
        split = calculate_marketplace_split(499)

        assert split.platform_fee_cents == 50
        # round(499 × 2.9%) + 30 = 14 + 30
        assert split.processor_fee_cents == 44
        assert split.owner_net_cents == 405
        assert split.processor_fee_is_estimate is True

    def test_reported_processor_fee_replaces_estimate(self):
        split = calculate_marketplace_split(1000, reported_processor_fee_cents=25)

        assert split.platform_fee_cents == 100
        assert split.processor_fee_cents == 25
        assert split.owner_net_cents == 875
        assert split.processor_fee_is_estimate is False

    def test_fees_are_capped_so_owner_net_is_never_negative(self):
        split = calculate_marketplace_split(20)

        assert split.platform_fee_cents == 2
        assert split.processor_fee_cents == 18
        assert split.owner_net_cents == 0

    def test_capped_reported_fee_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="paywall.modules.ledger.services.fee_calculator"):
            split = calculate_marketplace_split(100, reported_processor_fee_cents=95)

        assert (split.platform_fee_cents, split.processor_fee_cents, split.owner_net_cents) == (10, 90, 0)
        assert any("processor_fee_capped" in r.getMessage() for r in caplog.records)

    def test_uncapped_reported_fee_logs_nothing(self, caplog):
        with caplog.at_level(logging.WARNING, logger="paywall.modules.ledger.services.fee_calculator"):
            calculate_marketplace_split(1000, reported_processor_fee_cents=25)

        assert not any("processor_fee_capped" in r.getMessage() for r in caplog.records)

    def test_zero_amount(self):
        split = calculate_marketplace_split(0)
        assert (split.platform_fee_cents, split.processor_fee_cents, split.owner_net_cents) == (0, 0, 0)

    @pytest.mark.parametrize("gross", [1, 99, 499, 1000, 2599, 100_000])
    def test_split_always_balances(self, gross):
        split = calculate_marketplace_split(gross, "12.5")
        assert split.platform_fee_cents + split.processor_fee_cents + split.owner_net_cents == gross

    def test_negative_gross_is_an_invariant_violation(self):
        with pytest.raises(InvariantViolationError):
            calculate_marketplace_split(-1)

    def test_negative_reported_fee_is_an_invariant_violation(self):
        with pytest.raises(InvariantViolationError):
            calculate_marketplace_split(1000, reported_processor_fee_cents=-5)

    def test_check_detects_unbalanced_split(self):
        broken = MarketplaceSplit(
            gross_amount_cents=1000,
            platform_fee_cents=100,
            processor_fee_cents=59,
            owner_net_cents=800,
            processor_fee_is_estimate=True,
        )
        with pytest.raises(InvariantViolationError):
            broken.check()
