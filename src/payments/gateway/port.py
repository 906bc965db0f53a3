"""Payment dispatch port (abstract interface).

Defines the boundary calls the order workflow makes to the payment provider:
open a provider order for the buyer to approve, then capture it once the
buyer returns. Swapping FakePayPal (dev/test) for PayPalGateway (production)
changes no domain or application code.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ProviderOrderResult:
    """Result of opening a provider order."""

    success: bool
    provider_order_id: str | None = None
    approve_url: str | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class CaptureResult:
    """Result of capturing an approved provider order."""

    success: bool
    capture_id: str | None = None
    capture_status: str | None = None
    failure_reason: str | None = None


class PaymentDispatch(ABC):
    """Abstract payment provider interface."""

    @abstractmethod
    def create_order(self, order_id: str, amount: float, currency: str) -> ProviderOrderResult:
        """Open a provider order the buyer can approve."""
        ...

    @abstractmethod
    def capture(self, order_id: str, provider_order_id: str) -> CaptureResult:
        """Capture the funds of an approved provider order."""
        ...
