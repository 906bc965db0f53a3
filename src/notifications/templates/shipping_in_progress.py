"""Shipping in progress template: sent when an order leaves for a shore address."""

from notifications.templates.codes import NoticeCategory, NoticeCode


class ShippingInProgressTemplate:
    code = NoticeCode.SHIPPING_IN_PROGRESS.value
    category = NoticeCategory.DELIVERY.value

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        address = context.get("address") or "your delivery address"
        return {
            "title": "Shipping in progress",
            "body": f"Your order {order_id} has been handed to the courier for delivery to {address}.",
        }
