"""Domain events for the Order aggregate.

All events are versioned, immutable facts representing state changes of an
order request. They are persisted alongside the aggregate and describe what
the buyer, staff, or payment provider did to the order.
"""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A buyer submitted a reviewed cart selection as an order request."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    user_email = String(required=True)
    items = Text(required=True)  # JSON: list of line dicts
    delivery_option = String(required=True)
    subtotal = Float(required=True)
    shipping_fee = Float(required=True)
    total_amount = Float(required=True)
    currency = String(default="USD")
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderItemsAnnotated:
    """Staff recorded availability verdicts on one or more order lines."""

    __version__ = 1

    order_id = Identifier(required=True)
    annotations = Text(required=True)  # JSON: list of verdict dicts
    annotated_by = String(required=True)
    annotated_at = DateTime(required=True)


@ordering.event(part_of="Order")
class ItemQuantityAdjusted:
    """The buyer changed the requested quantity of a line during review."""

    __version__ = 1

    order_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@ordering.event(part_of="Order")
class ItemSelectionChanged:
    """The buyer included or excluded a line from confirmation."""

    __version__ = 1

    order_id = Identifier(required=True)
    product_id = Identifier(required=True)
    selected = Boolean(required=True)


@ordering.event(part_of="Order")
class OrderItemRemoved:
    """A line was removed from an unconfirmed order."""

    __version__ = 1

    order_id = Identifier(required=True)
    product_id = Identifier(required=True)
    remaining_items = Integer(required=True)


@ordering.event(part_of="Order")
class DeliveryDetailsUpdated:
    """The buyer changed where the order should be delivered."""

    __version__ = 1

    order_id = Identifier(required=True)
    delivery_details = Text(required=True)  # JSON: delivery dict


@ordering.event(part_of="Order")
class MessagePosted:
    """A message was appended to the order's thread."""

    __version__ = 1

    order_id = Identifier(required=True)
    message_id = Integer(required=True)
    sender = String(required=True)
    has_image = Boolean(default=False)
    posted_at = DateTime(required=True)


@ordering.event(part_of="Order")
class MessageRemoved:
    """A message was deleted from the order's thread."""

    __version__ = 1

    order_id = Identifier(required=True)
    message_id = Integer(required=True)
    removed_by = String(required=True)


@ordering.event(part_of="Order")
class OrderConfirmed:
    """The buyer confirmed the reviewed order; totals were recomputed."""

    __version__ = 1

    order_id = Identifier(required=True)
    confirmed_by = String(required=True)
    items = Text(required=True)  # JSON: billed line dicts
    subtotal = Float(required=True)
    total_amount = Float(required=True)
    confirmed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentRequested:
    """The order is awaiting staff confirmation before payment opens."""

    __version__ = 1

    order_id = Identifier(required=True)
    total_amount = Float(required=True)
    currency = String(default="USD")
    requested_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentConfirmed:
    """Staff confirmed the order is ready to be paid."""

    __version__ = 1

    order_id = Identifier(required=True)
    confirmed_by = String(required=True)
    confirmed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaidInCash:
    """The buyer chose to pay in cash on delivery."""

    __version__ = 1

    order_id = Identifier(required=True)
    amount = Float(required=True)
    changed_by = String(required=True)
    paid_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PayPalPaymentCaptured:
    """The payment provider reported a successful PayPal capture."""

    __version__ = 1

    order_id = Identifier(required=True)
    paypal_order_id = String(required=True)
    paypal_capture_id = String(required=True)
    amount = Float(required=True)
    captured_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderDelivered:
    """Staff marked the shipment as delivered."""

    __version__ = 1

    order_id = Identifier(required=True)
    delivery_option = String(required=True)
    actual_delivery = String(required=True)  # ISO date
    delivered_at = DateTime(required=True)
