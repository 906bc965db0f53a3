"""PayPal receipt template: sent when a PayPal capture succeeds."""

from notifications.templates.codes import NoticeCategory, NoticeCode


class PayPalReceiptTemplate:
    code = NoticeCode.PAYPAL_PAID.value
    category = NoticeCategory.PAYMENT.value

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        total = context.get("total_amount", "0.00")
        currency = context.get("currency", "USD")
        return {
            "title": "Payment Received",
            "body": (
                f"We received your PayPal payment of {currency} {total} for order {order_id}. "
                "Your order will be shipped soon."
            ),
        }
