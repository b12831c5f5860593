# -*- coding: utf-8 -*-
"""
Tests del cliente de Square contra un transporte httpx simulado.

Autor: Equipo Paywall
Fecha: 2026-02-17
"""

import json
from uuid import uuid4

import httpx
import pytest

from paywall.shared.errors import GatewayError
from paywall.modules.purchases.adapters import GatewayPaymentStatus, SquareGatewayClient


def _client(handler, max_retries=0, **kwargs):
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        base_url="https://connect.squareupsandbox.test",
    )
    params = {"access_token": "sq-token", "location_id": "LOC1"}
    params.update(kwargs)
    return SquareGatewayClient(
        base_url="https://connect.squareupsandbox.test",
        max_retries=max_retries,
        http_client=http_client,
        **params,
    )


class TestConfirmPayment:
    async def test_completed_payment(self):
        seen = {}
        purchase_id = uuid4()

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "payment": {
                        "id": "sq_pay_1",
                        "status": "COMPLETED",
                        "customer_id": "sq_cust_1",
                        "processing_fee": [{"amount_money": {"amount": 44, "currency": "USD"}}],
                    }
                },
            )

        gateway = _client(handler)
        confirmation = await gateway.confirm_payment(purchase_id, "cnon:card-ok", 499, "USD")

        assert confirmation.provider_payment_id == "sq_pay_1"
        assert confirmation.is_success
        assert confirmation.processing_fee_cents == 44
        assert seen["path"] == "/v2/payments"
        assert seen["auth"] == "Bearer sq-token"
        assert seen["body"]["idempotency_key"] == str(purchase_id)
        assert seen["body"]["reference_id"] == str(purchase_id)
        assert seen["body"]["amount_money"] == {"amount": 499, "currency": "USD"}
        assert seen["body"]["location_id"] == "LOC1"

    async def test_declined_card_returns_failed_payment(self):
        def handler(request):
            return httpx.Response(
                402,
                json={
                    "errors": [{"code": "CARD_DECLINED"}],
                    "payment": {"id": "sq_pay_2", "status": "FAILED"},
                },
            )

        confirmation = await _client(handler).confirm_payment(uuid4(), "cnon:declined", 499, "USD")

        assert confirmation.status == GatewayPaymentStatus.FAILED
        assert confirmation.is_failure

    async def test_rejected_request_raises_with_codes(self):
        def handler(request):
            return httpx.Response(400, json={"errors": [{"code": "INVALID_VALUE"}, {"code": "BAD_REQUEST"}]})

        with pytest.raises(GatewayError) as exc:
            await _client(handler).confirm_payment(uuid4(), "cnon:1", 499, "USD")

        assert "INVALID_VALUE,BAD_REQUEST" in exc.value.message
        assert exc.value.retryable is False
        assert exc.value.status_code == 400

    async def test_timeout_is_retryable_gateway_error(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(GatewayError) as exc:
            await _client(handler).confirm_payment(uuid4(), "cnon:1", 499, "USD")

        assert exc.value.retryable is True

    async def test_server_error_is_retried_then_succeeds(self):
        attempts = []

        def handler(request):
            attempts.append(json.loads(request.content)["idempotency_key"])
            if len(attempts) == 1:
                return httpx.Response(503, json={"errors": [{"code": "SERVICE_UNAVAILABLE"}]})
            return httpx.Response(200, json={"payment": {"id": "sq_pay_3", "status": "COMPLETED"}})

        confirmation = await _client(handler, max_retries=1).confirm_payment(uuid4(), "cnon:1", 499, "USD")

        assert confirmation.provider_payment_id == "sq_pay_3"
        # El mismo idempotency_key en cada intento: Square deduplica el cobro
        assert len(attempts) == 2
        assert attempts[0] == attempts[1]

    async def test_non_json_response(self):
        def handler(request):
            return httpx.Response(502, text="<html>bad gateway</html>")

        with pytest.raises(GatewayError) as exc:
            await _client(handler).confirm_payment(uuid4(), "cnon:1", 499, "USD")

        assert exc.value.retryable is True

    async def test_unconfigured_gateway_never_calls_out(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={})

        gateway = _client(handler, access_token=None)

        with pytest.raises(GatewayError):
            await gateway.confirm_payment(uuid4(), "cnon:1", 499, "USD")
        assert calls == []


class TestLifecycle:
    async def test_injected_client_is_not_closed(self):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        gateway = SquareGatewayClient(
            access_token="t", location_id="l", base_url="https://x.test", http_client=http_client
        )

        await gateway.aclose()

        assert http_client.is_closed is False
        await http_client.aclose()
