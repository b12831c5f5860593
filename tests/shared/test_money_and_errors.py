# -*- coding: utf-8 -*-
"""
Tests de aritmética de montos y de la taxonomía de errores.

Autor: Equipo Paywall
Fecha: 2026-02-17
"""

import pytest

from paywall.shared.errors import (
    ErrorCode,
    GatewayError,
    InvalidStateError,
    InvariantViolationError,
    NotFoundError,
    UnauthorizedError,
    ValidationFailedError,
)
from paywall.shared.utils.money import floor_percent_of, format_money, percent_of, prorate


class TestMoney:
    def test_percent_of_rounds_half_up(self):
        assert percent_of(499, 10) == 50  # 49.9
        assert percent_of(5, 10) == 1  # 0.5
        assert percent_of(1000, "2.9") == 29

    def test_floor_percent_never_rounds_up(self):
        assert floor_percent_of(499, 10) == 49
        assert floor_percent_of(999, 50) == 499

    def test_prorate(self):
        assert prorate(100, 500, 1000) == 50
        assert prorate(50, 250, 499) == 25  # 25.05

    def test_prorate_rejects_zero_whole(self):
        with pytest.raises(ValueError):
            prorate(100, 1, 0)

    def test_format_money(self):
        assert format_money(499) == "4.99 USD"
        assert format_money(-1000, "MXN") == "-10.00 MXN"


class TestErrorTaxonomy:
    """Cada error tipado mapea a un código y un status sin comparar strings."""

    @pytest.mark.parametrize(
        "error, code, status",
        [
            (NotFoundError("Purchase", "abc"), ErrorCode.NOT_FOUND, 404),
            (InvalidStateError("failed", "paid"), ErrorCode.INVALID_STATE, 409),
            (ValidationFailedError("bad", reason_code="expired"), ErrorCode.VALIDATION_FAILED, 422),
            (UnauthorizedError(), ErrorCode.UNAUTHORIZED, 401),
            (GatewayError("timeout", retryable=True), ErrorCode.GATEWAY_ERROR, 502),
            (InvariantViolationError("mismatch", gross=1), ErrorCode.INVARIANT_VIOLATION, 500),
        ],
    )
    def test_code_and_status(self, error, code, status):
        assert error.code == code
        assert error.http_status == status
        assert error.to_dict()["error_code"] == code.value

    def test_validation_error_carries_reason_code(self):
        err = ValidationFailedError("This coupon has expired", reason_code="expired")
        assert err.to_dict() == {
            "error_code": "VALIDATION_FAILED",
            "message": "This coupon has expired",
            "details": {"reason_code": "expired"},
        }

    def test_unauthorized_message_is_uniform(self):
        assert UnauthorizedError().message == "Access denied"
