"""Delivered template: sent when an onboard delivery reaches the vessel."""

from notifications.templates.codes import NoticeCategory, NoticeCode


class DeliveredTemplate:
    code = NoticeCode.DELIVERED.value
    category = NoticeCategory.DELIVERY.value

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        port_name = context.get("port_name") or "your port of call"
        return {
            "title": "Order Delivered",
            "body": f"Your order {order_id} has been delivered successfully to your vessel at {port_name}.",
        }
