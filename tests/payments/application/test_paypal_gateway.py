"""Tests for the PayPal REST adapter against a stubbed HTTP session."""

from unittest.mock import MagicMock

import requests
from payments.gateway.paypal_adapter import LIVE_URL, SANDBOX_URL, PayPalGateway


def _response(status_code=200, payload=None):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.json.return_value = payload if payload is not None else {}
    return response


def _token():
    return _response(200, {"access_token": "tok-123", "expires_in": 3600})


def _gateway(*responses, **kwargs):
    session = MagicMock(spec=requests.Session)
    session.post.side_effect = list(responses)
    return PayPalGateway(client_id="client", client_secret="secret", session=session, **kwargs), session


class TestCreateOrder:
    def test_returns_approve_link(self):
        created = _response(
            201,
            {
                "id": "PP-ORDER-1",
                "links": [
                    {"rel": "self", "href": "https://api-m.sandbox.paypal.com/v2/checkout/orders/PP-ORDER-1"},
                    {"rel": "approve", "href": "https://www.sandbox.paypal.com/checkoutnow?token=PP-ORDER-1"},
                ],
            },
        )
        gateway, session = _gateway(_token(), created)

        result = gateway.create_order("ORD-1", 80.0, "USD")

        assert result.success is True
        assert result.provider_order_id == "PP-ORDER-1"
        assert result.approve_url.endswith("token=PP-ORDER-1")

        call = session.post.call_args_list[1]
        body = call.kwargs["json"]
        assert call.args[0] == f"{SANDBOX_URL}/v2/checkout/orders"
        assert body["purchase_units"][0]["amount"] == {"currency_code": "USD", "value": "80.00"}
        assert body["purchase_units"][0]["custom_id"] == "ORD-1"
        assert call.kwargs["headers"]["Authorization"] == "Bearer tok-123"

    def test_rejection_reports_message(self):
        gateway, _ = _gateway(_token(), _response(422, {"name": "UNPROCESSABLE_ENTITY", "message": "Amount invalid"}))
        result = gateway.create_order("ORD-1", 80.0, "USD")
        assert result.success is False
        assert result.failure_reason == "Amount invalid"

    def test_transport_error_is_reported(self):
        gateway, _ = _gateway(_token(), requests.ConnectionError("connection reset"))
        result = gateway.create_order("ORD-1", 80.0, "USD")
        assert result.success is False
        assert "connection reset" in result.failure_reason

    def test_token_is_reused(self):
        gateway, session = _gateway(
            _token(),
            _response(201, {"id": "PP-1", "links": []}),
            _response(201, {"id": "PP-2", "links": []}),
        )
        gateway.create_order("ORD-1", 10.0, "USD")
        gateway.create_order("ORD-2", 10.0, "USD")
        token_calls = [call for call in session.post.call_args_list if call.args[0].endswith("/v1/oauth2/token")]
        assert len(token_calls) == 1

    def test_token_without_access_token_is_reported(self):
        gateway, session = _gateway(_response(200, {"token_type": "Bearer"}))
        result = gateway.create_order("ORD-1", 80.0, "USD")
        assert result.success is False
        assert "access_token" in result.failure_reason
        assert session.post.call_count == 1


class TestCapture:
    def test_completed_capture(self):
        captured = _response(
            201,
            {"purchase_units": [{"payments": {"captures": [{"id": "CAP-1", "status": "COMPLETED"}]}}]},
        )
        gateway, session = _gateway(_token(), captured)

        result = gateway.capture("ORD-1", "PP-ORDER-1")

        assert result.success is True
        assert result.capture_id == "CAP-1"
        assert session.post.call_args_list[1].args[0] == f"{SANDBOX_URL}/v2/checkout/orders/PP-ORDER-1/capture"

    def test_pending_capture_is_not_success(self):
        captured = _response(
            201,
            {"purchase_units": [{"payments": {"captures": [{"id": "CAP-1", "status": "PENDING"}]}}]},
        )
        gateway, _ = _gateway(_token(), captured)
        result = gateway.capture("ORD-1", "PP-ORDER-1")
        assert result.success is False
        assert result.capture_status == "PENDING"

    def test_missing_capture_details(self):
        gateway, _ = _gateway(_token(), _response(201, {"purchase_units": []}))
        result = gateway.capture("ORD-1", "PP-ORDER-1")
        assert result.success is False
        assert "missing" in result.failure_reason

    def test_unparseable_error_body(self):
        failed = _response(500)
        failed.json.side_effect = ValueError("not json")
        gateway, _ = _gateway(_token(), failed)
        result = gateway.capture("ORD-1", "PP-ORDER-1")
        assert result.failure_reason == "HTTP 500"

    def test_malformed_token_fails_capture(self):
        gateway, _ = _gateway(_response(200, {}))
        result = gateway.capture("ORD-1", "PP-ORDER-1")
        assert result.success is False


class TestConfiguration:
    def test_live_environment_uses_live_url(self):
        gateway = PayPalGateway(client_id="client", client_secret="secret", environment="live")
        assert gateway.base_url == LIVE_URL

    def test_return_urls_point_back_to_order(self):
        created = _response(201, {"id": "PP-1", "links": []})
        gateway, session = _gateway(_token(), created, return_base_url="https://shop.example.com/")
        gateway.create_order("ORD-1", 10.0, "USD")
        context = session.post.call_args_list[1].kwargs["json"]["application_context"]
        assert context["return_url"] == "https://shop.example.com/orders/payment/ORD-1?status=success"
        assert context["cancel_url"] == "https://shop.example.com/orders/payment/ORD-1?status=cancel"
