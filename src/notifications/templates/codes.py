"""Notice codes understood by the buyer's notification inbox."""

from enum import Enum


class NoticeCode(Enum):
    PAYMENT_CONFIRMED = "Payment(Confirmed)"
    PAY_IN_CASH = "Pay in Cash"
    PAYPAL_PAID = "PayPal(Paid)"
    DELIVERED = "Delivered"
    SHIPPING_IN_PROGRESS = "Payment(EMS)"


class NoticeCategory(Enum):
    PAYMENT = "Payment"
    DELIVERY = "Delivery"
