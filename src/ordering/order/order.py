"""Order aggregate (CQRS): an order request negotiated between buyer and staff.

An order is created from the buyer's selected cart lines. Staff annotate each
line with an availability verdict, the buyer reconciles those verdicts over
the order's message thread, and only a consistent order may be confirmed and
paid. Every status change appends one entry to the status history.

State Machine:
    Order → Order(Confirmed) → Payment(Request) → Payment(Confirmed)
    Payment(Confirmed) → {PayPal(Paid), Pay in Cash} → Delivered
"""

import json
from datetime import UTC, date, datetime
from uuid import uuid4

from catalogue.pricing.port import ProductPrice
from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from ordering.domain import ordering
from ordering.order.consistency import check_consistency
from ordering.order.events import (
    DeliveryDetailsUpdated,
    ItemQuantityAdjusted,
    ItemSelectionChanged,
    MessagePosted,
    MessageRemoved,
    OrderConfirmed,
    OrderDelivered,
    OrderItemRemoved,
    OrderItemsAnnotated,
    OrderPlaced,
    PaidInCash,
    PaymentConfirmed,
    PaymentRequested,
    PayPalPaymentCaptured,
)
from ordering.order.status import (
    AdminStatus,
    DeliveryOption,
    OrderStatus,
    PaymentMethod,
    Sender,
    display_status,
    parse_admin_status,
    parse_status,
)

_VALID_TRANSITIONS = {
    OrderStatus.ORDER_REQUEST: {OrderStatus.ORDER_CONFIRMED},
    OrderStatus.ORDER_CONFIRMED: {OrderStatus.PAYMENT_REQUEST},
    OrderStatus.PAYMENT_REQUEST: {OrderStatus.PAYMENT_CONFIRMED},
    OrderStatus.PAYMENT_CONFIRMED: {OrderStatus.PAYPAL_PAID, OrderStatus.PAY_IN_CASH},
    OrderStatus.PAYPAL_PAID: {OrderStatus.DELIVERED},
    OrderStatus.PAY_IN_CASH: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # terminal
}

# Verdicts under which the buyer may still change the requested quantity
_ADJUSTABLE_VERDICTS = {AdminStatus.AVAILABLE, AdminStatus.LIMITED}

_DELIVERY_FIELDS = {
    DeliveryOption.ONBOARD: ("port_name", "expected_shipping_date"),
    DeliveryOption.ALTERNATIVE: ("address", "postal_code"),
}

_DELIVERY_FIELD_LABELS = {
    "port_name": "Port name",
    "expected_shipping_date": "Expected shipping date",
    "address": "Address",
    "postal_code": "Postal code",
}


def generate_order_id() -> str:
    return f"ORD-{uuid4().hex[:8].upper()}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class DeliveryDetails:
    """Where the crew receives the order: alongside a port call or at a shore address."""

    option = String(required=True, max_length=20, choices=DeliveryOption)
    port_name = String(max_length=255)
    expected_shipping_date = String(max_length=10)  # ISO date string
    address = String(max_length=500)
    postal_code = String(max_length=20)

    @invariant.post
    def exactly_one_variant_is_populated(self):
        option = DeliveryOption(self.option)
        missing = [name for name in _DELIVERY_FIELDS[option] if not getattr(self, name)]
        if missing:
            raise ValidationError(
                {name: [f"{_DELIVERY_FIELD_LABELS[name]} is required for {option.value} delivery"] for name in missing}
            )

        foreign = [
            name
            for other, names in _DELIVERY_FIELDS.items()
            if other != option
            for name in names
            if getattr(self, name)
        ]
        if foreign:
            raise ValidationError({"delivery_details": [f"Unexpected fields for {option.value} delivery: {', '.join(foreign)}"]})

    @invariant.post
    def shipping_date_must_be_iso(self):
        if self.expected_shipping_date:
            try:
                date.fromisoformat(self.expected_shipping_date)
            except ValueError:
                raise ValidationError(
                    {"expected_shipping_date": ["Expected shipping date must be formatted as YYYY-MM-DD"]}
                ) from None

    def as_payload(self) -> dict:
        fields = _DELIVERY_FIELDS[DeliveryOption(self.option)]
        return {"option": self.option, **{name: getattr(self, name) for name in fields}}


def build_delivery_details(data: dict | None) -> DeliveryDetails:
    """Build DeliveryDetails from raw input, keeping only the chosen variant's fields."""
    data = data or {}
    raw_option = (data.get("option") or "").strip().lower()
    try:
        option = DeliveryOption(raw_option)
    except ValueError:
        raise ValidationError({"option": ["Choose onboard or alternative delivery"]}) from None

    values = {}
    for name in _DELIVERY_FIELDS[option]:
        value = data.get(name)
        values[name] = str(value).strip() if value is not None else None
        if not values[name]:
            values[name] = None
    return DeliveryDetails(option=option.value, **values)


@ordering.value_object(part_of="Order")
class OrderPricing:
    """Monetary snapshot; recomputed only when the order is placed or confirmed."""

    subtotal = Float(default=0.0)
    shipping_fee = Float(default=0.0)
    tax = Float(default=0.0)
    total_amount = Float(default=0.0)
    currency = String(max_length=3, default="USD")


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """A product line in an order, carrying the buyer's request and the staff verdict."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    sku = String(max_length=100)
    image_url = String(max_length=1000)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)  # percent
    admin_status = String(
        max_length=30,
        choices=AdminStatus,
        default=AdminStatus.PENDING_REVIEW.value,
    )
    admin_quantity = Integer(min_value=0)
    alternative_offer = String(max_length=500)
    selected = Boolean(default=True)
    position = Integer(default=0)

    @property
    def billable_quantity(self) -> int:
        """Quantity charged at confirmation: the request, capped by the staff-approved quantity."""
        if self.admin_quantity is None:
            return self.quantity
        return min(self.quantity, self.admin_quantity)

    def as_payload(self) -> dict:
        return {
            "product_id": str(self.product_id),
            "name": self.name,
            "sku": self.sku,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "discount": self.discount,
            "admin_status": self.admin_status,
            "admin_quantity": self.admin_quantity,
            "alternative_offer": self.alternative_offer,
            "selected": self.selected,
        }


@ordering.entity(part_of="Order")
class Message:
    """A chat message in the order's thread."""

    sequence = Integer(required=True, min_value=1)
    sender = String(required=True, max_length=10, choices=Sender)
    text = Text()
    image_url = String(max_length=1000)
    timestamp = DateTime(required=True)


@ordering.entity(part_of="Order")
class StatusChange:
    """One entry in the append-only status history."""

    sequence = Integer(required=True, min_value=1)
    timestamp = DateTime(required=True)
    old_status = String(max_length=30)
    new_status = String(required=True, max_length=30)
    changed_by = String(required=True, max_length=255)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    user_id = Identifier(required=True)
    user_email = String(required=True, max_length=255)
    user_name = String(max_length=255)
    ship_name = String(max_length=255)
    phone_number = String(max_length=30)
    status = String(
        max_length=30,
        choices=OrderStatus,
        default=OrderStatus.ORDER_REQUEST.value,
    )
    items = HasMany(OrderItem)
    delivery_details = ValueObject(DeliveryDetails)
    pricing = ValueObject(OrderPricing)
    messages = HasMany(Message)
    status_history = HasMany(StatusChange)
    payment_method = String(max_length=30)
    paypal_order_id = String(max_length=100)
    paypal_capture_id = String(max_length=100)
    actual_delivery = String(max_length=10)  # ISO date string
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def status_history_must_be_a_chain(self):
        previous = None
        for change in self.history:
            if change.old_status != previous:
                raise ValidationError(
                    {"status_history": [f"History entry {change.sequence} starts from {change.old_status}, expected {previous}"]}
                )
            previous = change.new_status
        if previous is not None and previous != self.status:
            raise ValidationError({"status": [f"Status {self.status} does not match the latest history entry {previous}"]})

    @invariant.post
    def message_ids_must_be_unique(self):
        sequences = [message.sequence for message in self.messages or []]
        if len(sequences) != len(set(sequences)):
            raise ValidationError({"messages": ["Message ids must be unique within an order"]})

    @invariant.post
    def products_must_be_unique(self):
        product_ids = [str(item.product_id) for item in self.items or []]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"items": ["Each product can appear only once in an order"]})

    # -------------------------------------------------------------------
    # Ordered views over child collections
    # -------------------------------------------------------------------
    @property
    def lines(self) -> list[OrderItem]:
        return sorted(self.items or [], key=lambda item: item.position or 0)

    @property
    def selected_lines(self) -> list[OrderItem]:
        return [line for line in self.lines if line.selected]

    @property
    def thread(self) -> list[Message]:
        return sorted(self.messages or [], key=lambda message: message.sequence)

    @property
    def history(self) -> list[StatusChange]:
        return sorted(self.status_history or [], key=lambda change: change.sequence)

    @property
    def latest_status(self) -> str:
        """Status according to the most recent history entry."""
        history = self.history
        return history[-1].new_status if history else self.status

    @property
    def status_label(self) -> str:
        return display_status(self.latest_status)

    @property
    def has_paypal_payment(self) -> bool:
        return any(change.new_status == OrderStatus.PAYPAL_PAID.value for change in self.history)

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        user_id: str,
        user_email: str,
        items_data: list[dict],
        delivery_details: dict,
        shipping_fee: float,
        tax: float = 0.0,
        currency: str = "USD",
        user_name: str | None = None,
        ship_name: str | None = None,
        phone_number: str | None = None,
        placed_by: str | None = None,
    ) -> "Order":
        """Create an order request from the buyer's selected cart lines."""
        if not items_data:
            raise ValidationError({"items": ["Select at least one item to place an order"]})
        details = build_delivery_details(delivery_details)

        now = datetime.now(UTC)
        order = cls(
            id=generate_order_id(),
            user_id=user_id,
            user_email=user_email,
            user_name=user_name,
            ship_name=ship_name,
            phone_number=phone_number,
            status=OrderStatus.ORDER_REQUEST.value,
            delivery_details=details,
            created_at=now,
            updated_at=now,
        )
        for position, item_data in enumerate(items_data):
            quantity = item_data.get("quantity")
            order.add_items(
                OrderItem(
                    product_id=item_data.get("product_id"),
                    name=item_data.get("name"),
                    sku=item_data.get("sku"),
                    image_url=item_data.get("image_url"),
                    quantity=quantity,
                    unit_price=item_data.get("unit_price"),
                    discount=item_data.get("discount") or 0.0,
                    admin_status=AdminStatus.PENDING_REVIEW.value,
                    admin_quantity=quantity,
                    selected=True,
                    position=position,
                )
            )

        with atomic_change(order):
            order.pricing = order._price_lines(order.lines, shipping_fee, tax, currency, billable=False)
            order._record_transition(None, OrderStatus.ORDER_REQUEST, placed_by or user_email, now)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                user_email=user_email,
                items=json.dumps([line.as_payload() for line in order.lines]),
                delivery_option=details.option,
                subtotal=order.pricing.subtotal,
                shipping_fee=order.pricing.shipping_fee,
                total_amount=order.pricing.total_amount,
                currency=currency,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: OrderStatus) -> None:
        current = parse_status(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError(
                {"status": [f"Cannot transition from {display_status(current)} to {display_status(target_status)}"]}
            )

    def _assert_under_review(self, action: str) -> None:
        if parse_status(self.status) != OrderStatus.ORDER_REQUEST:
            raise ValidationError({"status": [f"Cannot {action} once the order is {display_status(self.status)}"]})

    def _record_transition(
        self,
        current: OrderStatus | None,
        target: OrderStatus,
        changed_by: str,
        at: datetime,
    ) -> None:
        """Append one history entry and move the status. Callers wrap this in atomic_change."""
        history = self.history
        self.add_status_history(
            StatusChange(
                sequence=(history[-1].sequence if history else 0) + 1,
                timestamp=at,
                old_status=current.value if current else None,
                new_status=target.value,
                changed_by=changed_by,
            )
        )
        self.status = target.value
        self.updated_at = at

    def _transition(self, target: OrderStatus, changed_by: str, at: datetime) -> None:
        self._assert_can_transition(target)
        with atomic_change(self):
            self._record_transition(parse_status(self.status), target, changed_by, at)

    def _price_lines(
        self,
        lines: list[OrderItem],
        shipping_fee: float,
        tax: float,
        currency: str,
        billable: bool,
    ) -> OrderPricing:
        subtotal = round(
            sum(line.unit_price * (line.billable_quantity if billable else line.quantity) for line in lines),
            2,
        )
        return OrderPricing(
            subtotal=subtotal,
            shipping_fee=shipping_fee,
            tax=tax,
            total_amount=round(subtotal + shipping_fee + tax, 2),
            currency=currency,
        )

    def find_line(self, product_id: str) -> OrderItem:
        line = next((item for item in self.items or [] if str(item.product_id) == str(product_id)), None)
        if line is None:
            raise ValidationError({"product_id": [f"Product {product_id} is not part of this order"]})
        return line

    def holds_only(self, product_id: str) -> bool:
        """True when the given product is the order's last remaining line."""
        items = self.items or []
        return len(items) == 1 and str(items[0].product_id) == str(product_id)

    # -------------------------------------------------------------------
    # Staff review
    # -------------------------------------------------------------------
    def annotate_items(self, annotations: list[dict], annotated_by: str) -> None:
        """Record staff availability verdicts. All annotations apply or none do."""
        self._assert_under_review("annotate items")
        if not annotations:
            raise ValidationError({"annotations": ["At least one annotation is required"]})

        resolved = []
        for annotation in annotations:
            line = self.find_line(annotation.get("product_id"))
            verdict = parse_admin_status(annotation.get("admin_status"))
            quantity = annotation.get("admin_quantity")
            offer = None

            if verdict in _ADJUSTABLE_VERDICTS:
                quantity = line.quantity if quantity is None else int(quantity)
                if quantity < 0:
                    raise ValidationError({"admin_quantity": ["Approved quantity cannot be negative"]})
            elif verdict == AdminStatus.ALTERNATIVE_OFFER:
                quantity = None
                offer = (annotation.get("alternative_offer") or "").strip() or None
            elif verdict == AdminStatus.OUT_OF_STOCK:
                quantity = 0
            else:
                quantity = line.quantity
            resolved.append((line, verdict, quantity, offer))

        now = datetime.now(UTC)
        with atomic_change(self):
            for line, verdict, quantity, offer in resolved:
                line.admin_status = verdict.value
                line.admin_quantity = quantity
                line.alternative_offer = offer
            self.updated_at = now

        self.raise_(
            OrderItemsAnnotated(
                order_id=str(self.id),
                annotations=json.dumps(
                    [
                        {
                            "product_id": str(line.product_id),
                            "admin_status": verdict.value,
                            "admin_quantity": quantity,
                            "alternative_offer": offer,
                        }
                        for line, verdict, quantity, offer in resolved
                    ]
                ),
                annotated_by=annotated_by,
                annotated_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Buyer reconciliation
    # -------------------------------------------------------------------
    def adjust_item_quantity(self, product_id: str, quantity: int) -> int:
        """Change a line's requested quantity and return the quantity actually applied.

        The request is clamped to at least 1 and, on Limited lines, to the
        staff-approved quantity. An Available line's approval follows the request.
        """
        self._assert_under_review("change quantities")
        line = self.find_line(product_id)
        verdict = AdminStatus(line.admin_status)
        if verdict not in _ADJUSTABLE_VERDICTS:
            raise ValidationError({"quantity": [f"Quantity cannot be changed on a line marked {verdict.value}"]})

        applied = int(quantity)
        if verdict == AdminStatus.LIMITED and line.admin_quantity is not None:
            applied = min(applied, line.admin_quantity)
        applied = max(1, applied)

        previous = line.quantity
        if applied == previous:
            return applied

        with atomic_change(self):
            line.quantity = applied
            if verdict == AdminStatus.AVAILABLE:
                line.admin_quantity = applied
            self.updated_at = datetime.now(UTC)

        self.raise_(
            ItemQuantityAdjusted(
                order_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous,
                new_quantity=applied,
            )
        )
        return applied

    def set_item_selection(self, product_id: str, selected: bool) -> None:
        self._assert_under_review("change the selection")
        line = self.find_line(product_id)
        if bool(line.selected) == bool(selected):
            return

        line.selected = bool(selected)
        self.updated_at = datetime.now(UTC)
        self.raise_(
            ItemSelectionChanged(
                order_id=str(self.id),
                product_id=str(product_id),
                selected=bool(selected),
            )
        )

    def remove_item(self, product_id: str) -> None:
        """Remove a line. The last line cannot be removed; the order is discarded instead."""
        self._assert_under_review("remove items")
        line = self.find_line(product_id)
        if self.holds_only(product_id):
            raise ValidationError({"items": ["Removing the last item discards the whole order"]})

        self.remove_items(line)
        self.updated_at = datetime.now(UTC)
        self.raise_(
            OrderItemRemoved(
                order_id=str(self.id),
                product_id=str(product_id),
                remaining_items=len(self.items),
            )
        )

    def discard(self) -> None:
        """Guard for deleting the whole order when its last line goes."""
        self._assert_under_review("discard the order")

    def update_delivery_details(self, delivery_details: dict) -> None:
        self._assert_under_review("change delivery details")
        details = build_delivery_details(delivery_details)
        self.delivery_details = details
        self.updated_at = datetime.now(UTC)
        self.raise_(
            DeliveryDetailsUpdated(
                order_id=str(self.id),
                delivery_details=json.dumps(details.as_payload()),
            )
        )

    # -------------------------------------------------------------------
    # Messaging
    # -------------------------------------------------------------------
    def post_message(self, sender: Sender, text: str | None = None, image_url: str | None = None) -> Message:
        """Append a message to the thread; its id is one past the highest existing id."""
        text = (text or "").strip() or None
        image_url = (image_url or "").strip() or None
        if text is None and image_url is None:
            raise ValidationError({"message": ["A message needs text or an image"]})

        now = datetime.now(UTC)
        sequence = max((message.sequence for message in self.messages or []), default=0) + 1
        message = Message(
            sequence=sequence,
            sender=Sender(sender).value,
            text=text,
            image_url=image_url,
            timestamp=now,
        )
        self.add_messages(message)
        self.updated_at = now
        self.raise_(
            MessagePosted(
                order_id=str(self.id),
                message_id=sequence,
                sender=message.sender,
                has_image=image_url is not None,
                posted_at=now,
            )
        )
        return message

    def remove_message(self, message_id: int, removed_by: Sender) -> None:
        """Delete a message. Buyers may only delete their own, and only while under review."""
        removed_by = Sender(removed_by)
        message = next((m for m in self.messages or [] if m.sequence == int(message_id)), None)
        if message is None:
            raise ValidationError({"message_id": [f"Message {message_id} does not exist"]})

        if removed_by == Sender.USER:
            self._assert_under_review("delete messages")
            if message.sender != Sender.USER.value:
                raise ValidationError({"message_id": ["Only your own messages can be deleted"]})

        self.remove_messages(message)
        self.updated_at = datetime.now(UTC)
        self.raise_(
            MessageRemoved(
                order_id=str(self.id),
                message_id=int(message_id),
                removed_by=removed_by.value,
            )
        )

    # -------------------------------------------------------------------
    # Confirmation
    # -------------------------------------------------------------------
    def confirm(self, current_prices: dict[str, ProductPrice], confirmed_by: str) -> None:
        """Confirm the reviewed order and open the payment request.

        Unselected lines are dropped and totals are recomputed from billable
        quantities. The order passes through Order(Confirmed) straight to
        Payment(Request), recording both steps in the history.
        """
        self._assert_can_transition(OrderStatus.ORDER_CONFIRMED)
        report = check_consistency(self.lines, current_prices)
        if not report.holds:
            raise ValidationError({"items": report.messages})
        if self.delivery_details is None:
            raise ValidationError({"delivery_details": ["Delivery details are required"]})

        pricing = self.pricing or OrderPricing()
        billed = self.selected_lines
        dropped = [line for line in self.lines if not line.selected]
        now = datetime.now(UTC)

        with atomic_change(self):
            for line in dropped:
                self.remove_items(line)
            self.pricing = self._price_lines(billed, pricing.shipping_fee, pricing.tax, pricing.currency, billable=True)
            self._record_transition(OrderStatus.ORDER_REQUEST, OrderStatus.ORDER_CONFIRMED, confirmed_by, now)
            self._record_transition(OrderStatus.ORDER_CONFIRMED, OrderStatus.PAYMENT_REQUEST, confirmed_by, now)

        self.raise_(
            OrderConfirmed(
                order_id=str(self.id),
                confirmed_by=confirmed_by,
                items=json.dumps(
                    [{**line.as_payload(), "billable_quantity": line.billable_quantity} for line in billed]
                ),
                subtotal=self.pricing.subtotal,
                total_amount=self.pricing.total_amount,
                confirmed_at=now,
            )
        )
        self.raise_(
            PaymentRequested(
                order_id=str(self.id),
                total_amount=self.pricing.total_amount,
                currency=self.pricing.currency,
                requested_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def confirm_payment(self, confirmed_by: str) -> None:
        """Staff confirm the order is ready to be paid."""
        now = datetime.now(UTC)
        self._transition(OrderStatus.PAYMENT_CONFIRMED, confirmed_by, now)
        self.raise_(
            PaymentConfirmed(
                order_id=str(self.id),
                confirmed_by=confirmed_by,
                confirmed_at=now,
            )
        )

    def assert_payment_open(self) -> None:
        if parse_status(self.status) != OrderStatus.PAYMENT_CONFIRMED:
            raise ValidationError({"status": [f"Payment is not open for an order in {display_status(self.status)}"]})

    def attach_paypal_order(self, paypal_order_id: str) -> None:
        """Remember the provider order opened for this order's payment."""
        self.assert_payment_open()
        self.paypal_order_id = paypal_order_id
        self.updated_at = datetime.now(UTC)

    def pay_in_cash(self, changed_by: str) -> None:
        now = datetime.now(UTC)
        self._assert_can_transition(OrderStatus.PAY_IN_CASH)
        with atomic_change(self):
            self._record_transition(OrderStatus.PAYMENT_CONFIRMED, OrderStatus.PAY_IN_CASH, changed_by, now)
            self.payment_method = PaymentMethod.CASH.value
        self.raise_(
            PaidInCash(
                order_id=str(self.id),
                amount=self.pricing.total_amount if self.pricing else 0.0,
                changed_by=changed_by,
                paid_at=now,
            )
        )

    def record_paypal_payment(self, paypal_order_id: str, paypal_capture_id: str, changed_by: str) -> bool:
        """Record a successful PayPal capture.

        Returns False without changing anything when the order already has a
        PayPal(Paid) history entry, so a repeated callback is harmless.
        """
        if self.has_paypal_payment:
            return False

        now = datetime.now(UTC)
        self._assert_can_transition(OrderStatus.PAYPAL_PAID)
        with atomic_change(self):
            self._record_transition(OrderStatus.PAYMENT_CONFIRMED, OrderStatus.PAYPAL_PAID, changed_by, now)
            self.payment_method = PaymentMethod.PAYPAL.value
            self.paypal_order_id = paypal_order_id
            self.paypal_capture_id = paypal_capture_id
        self.raise_(
            PayPalPaymentCaptured(
                order_id=str(self.id),
                paypal_order_id=paypal_order_id,
                paypal_capture_id=paypal_capture_id,
                amount=self.pricing.total_amount if self.pricing else 0.0,
                captured_at=now,
            )
        )
        return True

    # -------------------------------------------------------------------
    # Delivery
    # -------------------------------------------------------------------
    def mark_delivered(self, changed_by: str, delivered_on: date | None = None) -> None:
        now = datetime.now(UTC)
        current = parse_status(self.status)
        self._assert_can_transition(OrderStatus.DELIVERED)
        actual_delivery = (delivered_on or now.date()).isoformat()
        with atomic_change(self):
            self._record_transition(current, OrderStatus.DELIVERED, changed_by, now)
            self.actual_delivery = actual_delivery
        self.raise_(
            OrderDelivered(
                order_id=str(self.id),
                delivery_option=self.delivery_details.option if self.delivery_details else "",
                actual_delivery=actual_delivery,
                delivered_at=now,
            )
        )
