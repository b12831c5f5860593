# -*- coding: utf-8 -*-
"""
paywall/modules/ledger/services/fee_calculator.py

Reparto marketplace de un cobro bruto:

    gross = platform_fee + processor_fee + owner_net

- platform_fee: round_half_up(gross × platform_fee_percent / 100)
- processor_fee: la comisión REPORTADA por el gateway cuando existe;
  si no, el estimado explícito round_half_up(gross × 2.9%) + 30¢.
  Al confirmar el pago el estimado se reemplaza por el valor real.
- Ambas comisiones se topan para que platform + processor ≤ gross
  (owner_net nunca es negativo).

Autor: Equipo Paywall
Fecha: 2026-02-07
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from paywall.shared.errors import InvariantViolationError
from paywall.shared.utils.money import percent_of

logger = logging.getLogger(__name__)

Percent = Union[int, str, Decimal]

DEFAULT_PLATFORM_FEE_PERCENT = Decimal("10")
DEFAULT_PROCESSOR_FEE_PERCENT = Decimal("2.9")
DEFAULT_PROCESSOR_FEE_FIXED_CENTS = 30


@dataclass(frozen=True)
class MarketplaceSplit:
    gross_amount_cents: int
    platform_fee_cents: int
    processor_fee_cents: int
    owner_net_cents: int
    processor_fee_is_estimate: bool

    def check(self) -> None:
        """Verifica la invariante del reparto; nunca la corrige."""
        if self.gross_amount_cents < 0 or self.platform_fee_cents < 0 or self.processor_fee_cents < 0:
            raise InvariantViolationError(
                "Negative amount in marketplace split",
                gross=self.gross_amount_cents,
                platform_fee=self.platform_fee_cents,
                processor_fee=self.processor_fee_cents,
            )
        total = self.platform_fee_cents + self.processor_fee_cents + self.owner_net_cents
        if total != self.gross_amount_cents or self.owner_net_cents < 0:
            raise InvariantViolationError(
                "Marketplace split does not balance",
                gross=self.gross_amount_cents,
                platform_fee=self.platform_fee_cents,
                processor_fee=self.processor_fee_cents,
                owner_net=self.owner_net_cents,
            )


def estimate_processor_fee(
    gross_amount_cents: int,
    percent: Percent = DEFAULT_PROCESSOR_FEE_PERCENT,
    fixed_cents: int = DEFAULT_PROCESSOR_FEE_FIXED_CENTS,
) -> int:
    """Estimado de comisión del procesador (fallback cuando no hay valor real)."""
    if gross_amount_cents <= 0:
        return 0
    return percent_of(gross_amount_cents, percent) + fixed_cents


def calculate_marketplace_split(
    gross_amount_cents: int,
    platform_fee_percent: Percent = DEFAULT_PLATFORM_FEE_PERCENT,
    *,
    reported_processor_fee_cents: Optional[int] = None,
    processor_fee_percent: Percent = DEFAULT_PROCESSOR_FEE_PERCENT,
    processor_fee_fixed_cents: int = DEFAULT_PROCESSOR_FEE_FIXED_CENTS,
) -> MarketplaceSplit:
    """
    Calcula el reparto marketplace de un cobro.

    Examples:
        >>> calculate_marketplace_split(499).platform_fee_cents
        50
        >>> s = calculate_marketplace_split(1000)
        >>> (s.platform_fee_cents, s.processor_fee_cents, s.owner_net_cents)
        (100, 59, 841)
    """
    if gross_amount_cents < 0:
        raise InvariantViolationError("Gross amount cannot be negative", gross=gross_amount_cents)
    if reported_processor_fee_cents is not None and reported_processor_fee_cents < 0:
        raise InvariantViolationError(
            "Gateway reported a negative processing fee",
            processor_fee=reported_processor_fee_cents,
        )

    platform_fee = min(percent_of(gross_amount_cents, platform_fee_percent), gross_amount_cents)

    is_estimate = reported_processor_fee_cents is None
    if is_estimate:
        processor_fee = estimate_processor_fee(
            gross_amount_cents, processor_fee_percent, processor_fee_fixed_cents
        )
    else:
        processor_fee = reported_processor_fee_cents

    max_processor_fee = gross_amount_cents - platform_fee
    if processor_fee > max_processor_fee:
        if not is_estimate:
            # La comisión real no cabe en el bruto: el dueño absorbe 0 y la diferencia se concilia aparte
            logger.warning(
                "processor_fee_capped gross=%d platform_fee=%d reported_fee=%d capped_fee=%d",
                gross_amount_cents, platform_fee, processor_fee, max_processor_fee,
            )
        processor_fee = max_processor_fee

    split = MarketplaceSplit(
        gross_amount_cents=gross_amount_cents,
        platform_fee_cents=platform_fee,
        processor_fee_cents=processor_fee,
        owner_net_cents=gross_amount_cents - platform_fee - processor_fee,
        processor_fee_is_estimate=is_estimate,
    )
    split.check()
    return split


__all__ = [
    "MarketplaceSplit",
    "calculate_marketplace_split",
    "estimate_processor_fee",
    "DEFAULT_PLATFORM_FEE_PERCENT",
]

# Fin del archivo paywall/modules/ledger/services/fee_calculator.py
