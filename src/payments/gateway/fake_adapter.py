"""Configurable fake PayPal provider for development and testing.

This adapter simulates the provider without any external calls. It can be
configured at runtime to succeed or fail, making it useful for:
- Automated tests with predictable outcomes
- Development without real PayPal credentials
"""

from uuid import uuid4

from payments.gateway.port import CaptureResult, PaymentDispatch, ProviderOrderResult


class FakePayPal(PaymentDispatch):
    """Configurable fake payment provider."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Payment declined"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Payment declined") -> None:
        """Configure provider behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_order(self, order_id: str, amount: float, currency: str) -> ProviderOrderResult:
        self.calls.append(
            {
                "method": "create_order",
                "order_id": order_id,
                "amount": amount,
                "currency": currency,
            }
        )

        if self.should_succeed:
            provider_order_id = f"FAKE-PP-{uuid4().hex[:12].upper()}"
            return ProviderOrderResult(
                success=True,
                provider_order_id=provider_order_id,
                approve_url=f"https://www.sandbox.paypal.com/checkoutnow?token={provider_order_id}",
            )
        return ProviderOrderResult(success=False, failure_reason=self.failure_reason)

    def capture(self, order_id: str, provider_order_id: str) -> CaptureResult:
        self.calls.append(
            {
                "method": "capture",
                "order_id": order_id,
                "provider_order_id": provider_order_id,
            }
        )

        if self.should_succeed:
            return CaptureResult(
                success=True,
                capture_id=f"fake_cap_{uuid4().hex[:12]}",
                capture_status="COMPLETED",
            )
        return CaptureResult(
            success=False,
            capture_status="DECLINED",
            failure_reason=self.failure_reason,
        )

    def reset(self) -> None:
        self.calls.clear()
        self.should_succeed = True
        self.failure_reason = "Payment declined"
