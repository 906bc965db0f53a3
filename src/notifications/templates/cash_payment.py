"""Cash payment template: sent when the buyer chooses to pay in cash."""

from notifications.templates.codes import NoticeCategory, NoticeCode


class CashPaymentTemplate:
    code = NoticeCode.PAY_IN_CASH.value
    category = NoticeCategory.PAYMENT.value

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        total = context.get("total_amount", "0.00")
        currency = context.get("currency", "USD")
        return {
            "title": "Pay in Cash",
            "body": (
                f"You chose to pay in cash for order {order_id}. "
                f"Please have {currency} {total} ready when the order is delivered."
            ),
        }
