"""Buyer edits during reconciliation: commands and handler.

Each command re-reads the order, applies one change and writes the whole
order back. Removing the last line discards the order entirely.
"""

import json

import structlog
from protean import handle
from protean.fields import Boolean, Identifier, Integer, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class AdjustItemQuantity:
    order_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@ordering.command(part_of="Order")
class SetItemSelection:
    order_id = Identifier(required=True)
    product_id = Identifier(required=True)
    selected = Boolean(required=True)


@ordering.command(part_of="Order")
class UpdateOrderItem:
    order_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer()
    selected = Boolean()


@ordering.command(part_of="Order")
class RemoveOrderItem:
    order_id = Identifier(required=True)
    product_id = Identifier(required=True)


@ordering.command(part_of="Order")
class UpdateDeliveryDetails:
    order_id = Identifier(required=True)
    delivery_details = Text(required=True)  # JSON: delivery dict


@ordering.command_handler(part_of=Order)
class ReconciliationHandler:
    @handle(AdjustItemQuantity)
    def adjust_item_quantity(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        applied = order.adjust_item_quantity(command.product_id, command.quantity)
        repo.add(order)
        return applied

    @handle(SetItemSelection)
    def set_item_selection(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.set_item_selection(command.product_id, command.selected)
        repo.add(order)

    @handle(UpdateOrderItem)
    def update_order_item(self, command):
        """Apply a quantity and a selection change together; either both persist or neither does."""
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if command.selected is not None:
            order.set_item_selection(command.product_id, command.selected)
        if command.quantity is not None:
            order.adjust_item_quantity(command.product_id, command.quantity)
        repo.add(order)
        return order.find_line(command.product_id)

    @handle(RemoveOrderItem)
    def remove_order_item(self, command):
        """Remove a line; returns True when the order itself was deleted."""
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        if order.holds_only(command.product_id):
            order.discard()
            repo._dao.delete(order)
            logger.info(
                "Order discarded after its last item was removed",
                order_id=str(command.order_id),
                product_id=str(command.product_id),
            )
            return True

        order.remove_item(command.product_id)
        repo.add(order)
        return False

    @handle(UpdateDeliveryDetails)
    def update_delivery_details(self, command):
        delivery_details = (
            json.loads(command.delivery_details)
            if isinstance(command.delivery_details, str)
            else command.delivery_details
        )
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.update_delivery_details(delivery_details)
        repo.add(order)
