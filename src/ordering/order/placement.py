"""Order placement: command and handler.

Turns the buyer's reviewed cart selection into an order request.
"""

import json

import structlog
from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.messaging import filter_to_english
from ordering.order.order import Order
from ordering.order.status import Sender

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    user_email = String(required=True, max_length=255)
    user_name = String(max_length=255)
    ship_name = String(max_length=255)
    phone_number = String(max_length=30)
    items = Text(required=True)  # JSON: list of selected cart lines
    delivery_details = Text(required=True)  # JSON: delivery dict
    message = Text()
    shipping_fee = Float(default=0.0)
    tax = Float(default=0.0)
    currency = String(max_length=3, default="USD")


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items
        delivery_details = (
            json.loads(command.delivery_details)
            if isinstance(command.delivery_details, str)
            else command.delivery_details
        )

        order = Order.place(
            user_id=command.user_id,
            user_email=command.user_email,
            user_name=command.user_name,
            ship_name=command.ship_name,
            phone_number=command.phone_number,
            items_data=items_data,
            delivery_details=delivery_details,
            shipping_fee=command.shipping_fee or 0.0,
            tax=command.tax or 0.0,
            currency=command.currency or "USD",
        )
        note = filter_to_english(command.message).text
        if note.strip():
            order.post_message(Sender.USER, text=note)

        current_domain.repository_for(Order).add(order)
        logger.info(
            "Order placed",
            order_id=str(order.id),
            user_id=str(command.user_id),
            item_count=len(items_data),
        )
        return str(order.id)
