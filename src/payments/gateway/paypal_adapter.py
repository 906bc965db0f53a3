"""PayPal REST adapter (Orders v2).

Talks to the PayPal REST API with ``requests``:
- OAuth2 client-credentials token, cached until shortly before expiry
- POST /v2/checkout/orders to open an order the buyer approves
- POST /v2/checkout/orders/{id}/capture once the buyer returns

Transport and API failures are reported as unsuccessful results; nothing is
raised to the caller, so the order stays at its prior status.
"""

import time

import requests
import structlog

from payments.gateway.port import CaptureResult, PaymentDispatch, ProviderOrderResult

logger = structlog.get_logger(__name__)

SANDBOX_URL = "https://api-m.sandbox.paypal.com"
LIVE_URL = "https://api-m.paypal.com"


class PayPalGateway(PaymentDispatch):
    """Production PayPal adapter."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        environment: str = "sandbox",
        return_base_url: str = "http://localhost:3000",
        brand_name: str = "HarborCart",
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if not client_id or not client_secret:
            raise ValueError("PayPal API credentials are not set")
        self.client_id = client_id
        self.client_secret = client_secret
        self.base_url = LIVE_URL if environment == "live" else SANDBOX_URL
        self.return_base_url = return_base_url.rstrip("/")
        self.brand_name = brand_name
        self.timeout = timeout
        self.session = session or requests.Session()
        self._token: str | None = None
        self._token_expires_at: float = 0.0

    # -------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------
    def _access_token(self) -> str:
        if self._token and time.monotonic() < self._token_expires_at:
            return self._token

        response = self.session.post(
            f"{self.base_url}/v1/oauth2/token",
            auth=(self.client_id, self.client_secret),
            data={"grant_type": "client_credentials"},
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        payload = response.json()
        token = payload.get("access_token")
        if not token:
            raise requests.HTTPError("PayPal token response carried no access_token", response=response)
        self._token = token
        # Refresh a minute early
        self._token_expires_at = time.monotonic() + max(int(payload.get("expires_in", 0)) - 60, 0)
        return self._token

    def _headers(self, request_id: str) -> dict:
        return {
            "Authorization": f"Bearer {self._access_token()}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
            "PayPal-Request-Id": request_id,
        }

    @staticmethod
    def _error_reason(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return f"HTTP {response.status_code}"
        return body.get("message") or body.get("name") or f"HTTP {response.status_code}"

    # -------------------------------------------------------------------
    # Orders API
    # -------------------------------------------------------------------
    def create_order(self, order_id: str, amount: float, currency: str) -> ProviderOrderResult:
        body = {
            "intent": "CAPTURE",
            "purchase_units": [
                {
                    "amount": {"currency_code": currency, "value": f"{amount:.2f}"},
                    "description": f"Order {order_id}",
                    "custom_id": order_id,
                }
            ],
            "application_context": {
                "return_url": f"{self.return_base_url}/orders/payment/{order_id}?status=success",
                "cancel_url": f"{self.return_base_url}/orders/payment/{order_id}?status=cancel",
                "brand_name": self.brand_name,
                "shipping_preference": "NO_SHIPPING",
                "user_action": "PAY_NOW",
            },
        }
        try:
            response = self.session.post(
                f"{self.base_url}/v2/checkout/orders",
                json=body,
                headers=self._headers(f"create-{order_id}"),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("PayPal order creation failed", order_id=order_id, error=str(exc))
            return ProviderOrderResult(success=False, failure_reason=str(exc))

        if response.status_code not in (200, 201):
            reason = self._error_reason(response)
            logger.error("PayPal rejected order creation", order_id=order_id, status_code=response.status_code)
            return ProviderOrderResult(success=False, failure_reason=reason)

        result = response.json()
        approve_url = next(
            (link["href"] for link in result.get("links", []) if link.get("rel") in ("approve", "payer-action")),
            None,
        )
        return ProviderOrderResult(success=True, provider_order_id=result["id"], approve_url=approve_url)

    def capture(self, order_id: str, provider_order_id: str) -> CaptureResult:
        try:
            response = self.session.post(
                f"{self.base_url}/v2/checkout/orders/{provider_order_id}/capture",
                json={},
                headers=self._headers(f"capture-{order_id}-{provider_order_id}"),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("PayPal capture failed", order_id=order_id, error=str(exc))
            return CaptureResult(success=False, failure_reason=str(exc))

        if response.status_code not in (200, 201):
            reason = self._error_reason(response)
            logger.error("PayPal rejected capture", order_id=order_id, status_code=response.status_code)
            return CaptureResult(success=False, failure_reason=reason)

        result = response.json()
        try:
            capture = result["purchase_units"][0]["payments"]["captures"][0]
        except (KeyError, IndexError):
            return CaptureResult(success=False, failure_reason="Capture details missing from PayPal response")

        if capture.get("status") != "COMPLETED":
            return CaptureResult(
                success=False,
                capture_id=capture.get("id"),
                capture_status=capture.get("status"),
                failure_reason=f"Capture is {capture.get('status')}",
            )
        return CaptureResult(success=True, capture_id=capture["id"], capture_status=capture["status"])
