# -*- coding: utf-8 -*-
"""
Tests de normalización de webhooks de Square.

Autor: Equipo Paywall
Fecha: 2026-02-17
"""

import pytest

from paywall.modules.purchases.facades.webhooks import (
    WebhookNormalizationError,
    normalize_square_webhook,
)


class TestNormalizePayment:
    def test_payment_fields(self):
        normalized = normalize_square_webhook(
            {
                "type": "payment.updated",
                "event_id": "evt_1",
                "data": {
                    "object": {
                        "payment": {
                            "id": "sq_pay_1",
                            "status": "completed",
                            "reference_id": "abc",
                            "customer_id": "sq_cust_1",
                            "processing_fee": [
                                {"amount_money": {"amount": 30}},
                                {"amount_money": {"amount": 14}},
                            ],
                        }
                    }
                },
            }
        )

        assert normalized.is_payment_event
        assert normalized.provider_payment_id == "sq_pay_1"
        assert normalized.payment_status == "COMPLETED"
        assert normalized.reference_id == "abc"
        assert normalized.processing_fee_cents == 44

    def test_camel_case_keys_are_accepted(self):
        normalized = normalize_square_webhook(
            b'{"type": "payment.created", "eventId": "evt_2", "data": {"object": {"payment": '
            b'{"id": "sq_pay_2", "status": "FAILED", "referenceId": "r", '
            b'"processingFeeMoney": {"amount": 59}}}}}'
        )

        assert normalized.event_id == "evt_2"
        assert normalized.reference_id == "r"
        assert normalized.processing_fee_cents == 59

    def test_fee_absent_until_settled(self):
        normalized = normalize_square_webhook(
            {
                "type": "payment.updated",
                "event_id": "evt_3",
                "data": {"object": {"payment": {"id": "sq_pay_3", "status": "APPROVED"}}},
            }
        )
        assert normalized.processing_fee_cents is None


class TestNormalizeRefund:
    def test_refund_fields(self):
        normalized = normalize_square_webhook(
            {
                "type": "refund.updated",
                "event_id": "evt_r",
                "data": {
                    "object": {
                        "refund": {
                            "id": "sq_refund_1",
                            "status": "pending",
                            "payment_id": "sq_pay_1",
                            "amount_money": {"amount": 250, "currency": "USD"},
                        }
                    }
                },
            }
        )

        assert normalized.is_refund_event
        assert normalized.provider_payment_id == "sq_pay_1"
        assert normalized.provider_refund_id == "sq_refund_1"
        assert normalized.refund_status == "PENDING"
        assert normalized.refund_amount_cents == 250

    def test_negative_refund_amount_is_malformed(self):
        with pytest.raises(WebhookNormalizationError):
            normalize_square_webhook(
                {
                    "type": "refund.created",
                    "event_id": "evt_r",
                    "data": {
                        "object": {
                            "refund": {"id": "r", "payment_id": "p", "amount_money": {"amount": -5}}
                        }
                    },
                }
            )


class TestNormalizeOther:
    def test_unknown_type_keeps_identity_only(self):
        normalized = normalize_square_webhook({"type": "customer.created", "event_id": "evt_c"})

        assert not normalized.is_payment_event
        assert not normalized.is_refund_event
        assert normalized.provider_payment_id is None

    @pytest.mark.parametrize("body", [b"", b"{", "null", b'"text"'])
    def test_invalid_json(self, body):
        with pytest.raises(WebhookNormalizationError):
            normalize_square_webhook(body)
