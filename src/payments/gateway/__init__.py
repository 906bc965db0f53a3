"""Payment dispatch factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakePayPal for development and testing (PAYMENT_ADAPTER=fake, the default)
- PayPalGateway for production (PAYMENT_ADAPTER=paypal)
"""

import os

from payments.gateway.port import PaymentDispatch

_current_gateway: PaymentDispatch | None = None


def _build_gateway() -> PaymentDispatch:
    adapter = os.environ.get("PAYMENT_ADAPTER", "fake")
    if adapter == "fake":
        from payments.gateway.fake_adapter import FakePayPal

        return FakePayPal()
    if adapter == "paypal":
        from payments.gateway.paypal_adapter import PayPalGateway

        return PayPalGateway(
            client_id=os.environ.get("PAYPAL_CLIENT_ID", ""),
            client_secret=os.environ.get("PAYPAL_SECRET", ""),
            environment=os.environ.get("PAYPAL_ENV", "sandbox"),
            return_base_url=os.environ.get("HARBORCART_BASE_URL", "http://localhost:3000"),
        )
    raise ValueError(f"Unknown payment adapter: {adapter}")


def get_gateway() -> PaymentDispatch:
    """Return the current payment gateway. Defaults to FakePayPal."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _build_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentDispatch) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
