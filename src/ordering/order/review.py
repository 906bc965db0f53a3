"""Staff review of order lines: command and handler."""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class AnnotateOrderItems:
    order_id = Identifier(required=True)
    annotations = Text(required=True)  # JSON: list of {product_id, admin_status, admin_quantity, alternative_offer}
    annotated_by = String(required=True, max_length=255)


@ordering.command_handler(part_of=Order)
class AnnotateOrderItemsHandler:
    @handle(AnnotateOrderItems)
    def annotate_order_items(self, command):
        annotations = json.loads(command.annotations) if isinstance(command.annotations, str) else command.annotations

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.annotate_items(annotations, annotated_by=command.annotated_by)
        repo.add(order)
        logger.info(
            "Order lines annotated",
            order_id=str(command.order_id),
            annotated_by=command.annotated_by,
            count=len(annotations),
        )
