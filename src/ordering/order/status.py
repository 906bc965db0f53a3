"""Status vocabularies for order requests and their lines.

Stored tags are the exact strings persisted with the order. Labels are what
buyers and staff see; the only tag whose label differs is a fresh request,
stored as ``Order`` and shown as ``Order(Request)``.
"""

from enum import Enum

from protean.exceptions import ValidationError


class OrderStatus(Enum):
    ORDER_REQUEST = "Order"
    ORDER_CONFIRMED = "Order(Confirmed)"
    PAYMENT_REQUEST = "Payment(Request)"
    PAYMENT_CONFIRMED = "Payment(Confirmed)"
    PAYPAL_PAID = "PayPal(Paid)"
    PAY_IN_CASH = "Pay in Cash"
    DELIVERED = "Delivered"


class AdminStatus(Enum):
    PENDING_REVIEW = "Pending Review"
    AVAILABLE = "Available"
    LIMITED = "Limited"
    OUT_OF_STOCK = "Out of Stock"
    ALTERNATIVE_OFFER = "Alternative Offer"


class DeliveryOption(Enum):
    ONBOARD = "onboard"
    ALTERNATIVE = "alternative"


class Sender(Enum):
    USER = "User"
    ADMIN = "Admin"


class PaymentMethod(Enum):
    PAYPAL = "PayPal"
    CASH = "Pay in Cash"


_STATUS_ALIASES = {
    "Order(Request)": OrderStatus.ORDER_REQUEST,
}

_STATUS_LABELS = {
    OrderStatus.ORDER_REQUEST: "Order(Request)",
}

_ADMIN_STATUS_ALIASES = {
    "Limited Quantity": AdminStatus.LIMITED,
}


def parse_status(value: "str | OrderStatus") -> OrderStatus:
    """Resolve a stored tag or a display label to an OrderStatus."""
    if isinstance(value, OrderStatus):
        return value
    if value in _STATUS_ALIASES:
        return _STATUS_ALIASES[value]
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationError({"status": [f"Unknown order status: {value}"]}) from None


def display_status(value: "str | OrderStatus") -> str:
    """Return the buyer-facing label for a stored status tag."""
    status = parse_status(value)
    return _STATUS_LABELS.get(status, status.value)


def parse_admin_status(value: "str | AdminStatus") -> AdminStatus:
    if isinstance(value, AdminStatus):
        return value
    if value in _ADMIN_STATUS_ALIASES:
        return _ADMIN_STATUS_ALIASES[value]
    try:
        return AdminStatus(value)
    except ValueError:
        raise ValidationError({"admin_status": [f"Unknown availability verdict: {value}"]}) from None
