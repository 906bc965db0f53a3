"""Order confirmation: command and handler.

Confirmation re-derives the consistency check from the stored order and the
live catalogue; an inconsistent order is rejected with a validation error.
"""

import structlog
from catalogue.pricing import get_catalog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


def current_prices_for(order: Order) -> dict:
    """Fetch live catalogue prices for the order's selected lines."""
    return get_catalog().get_prices(str(line.product_id) for line in order.selected_lines)


@ordering.command(part_of="Order")
class SendOrderConfirmation:
    order_id = Identifier(required=True)
    confirmed_by = String(required=True, max_length=255)


@ordering.command_handler(part_of=Order)
class SendOrderConfirmationHandler:
    @handle(SendOrderConfirmation)
    def send_order_confirmation(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.confirm(current_prices_for(order), confirmed_by=command.confirmed_by)
        repo.add(order)
        logger.info(
            "Order confirmed",
            order_id=str(command.order_id),
            total_amount=order.pricing.total_amount,
            status=order.status,
        )
