"""Payment confirmed template: sent when staff open payment for an order."""

from notifications.templates.codes import NoticeCategory, NoticeCode


class PaymentConfirmedTemplate:
    code = NoticeCode.PAYMENT_CONFIRMED.value
    category = NoticeCategory.PAYMENT.value

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        total = context.get("total_amount", "0.00")
        currency = context.get("currency", "USD")
        return {
            "title": "Payment Confirmed",
            "body": (
                f"Your order {order_id} has been reviewed and confirmed. "
                f"You can now pay {currency} {total} by PayPal or in cash."
            ),
        }
