"""Order delivery: command and handler."""

from datetime import date

import structlog
from protean import handle
from protean.fields import Date, Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.notices import delivery_notice_code, notify_buyer
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class MarkDelivered:
    order_id = Identifier(required=True)
    changed_by = String(default="Admin", max_length=255)
    delivered_on = Date()


@ordering.command_handler(part_of=Order)
class MarkDeliveredHandler:
    @handle(MarkDelivered)
    def mark_delivered(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        delivered_on = command.delivered_on if isinstance(command.delivered_on, date) else None
        order.mark_delivered(changed_by=command.changed_by, delivered_on=delivered_on)
        repo.add(order)
        logger.info("Order delivered", order_id=str(order.id), actual_delivery=order.actual_delivery)
        notify_buyer(order, delivery_notice_code(order))
