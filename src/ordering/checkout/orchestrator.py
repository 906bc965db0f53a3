"""Checkout orchestrator: drives one buyer through the order review workflow.

Steps:
    1. cart_selection  → submit_review() places the order and clears the cart
    2. admin_feedback  → reconcile() re-reads the order and re-runs the
                         consistency check; buyer edits go through commands
    3. payment         → send_order_confirmation() moves the order to
                         Payment(Request); pay() hands off to cash or PayPal
    4. completed       → payment recorded

The buyer's identity and cart snapshot are passed in explicitly as a
BuyerContext. Every step re-reads the order from the repository, so the
consistency check always runs against the stored order and live prices.
"""

import json
import os
from dataclasses import dataclass, field
from enum import Enum

import structlog
from identity.cart import get_cart_store
from identity.cart.port import CartStoreError
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.order.confirmation import SendOrderConfirmation, current_prices_for
from ordering.order.consistency import ConsistencyReport, check_consistency
from ordering.order.messaging import PostedMessage, PostMessage, RemoveMessage
from ordering.order.order import Order, build_delivery_details
from ordering.order.payment import PayInCash, RecordPayPalPayment, StartPayPalPayment
from ordering.order.placement import PlaceOrder
from ordering.order.reconciliation import (
    AdjustItemQuantity,
    RemoveOrderItem,
    SetItemSelection,
    UpdateDeliveryDetails,
)
from ordering.order.status import OrderStatus, Sender, parse_status

logger = structlog.get_logger(__name__)

DEFAULT_SHIPPING_FEE = 20.0
DEFAULT_CURRENCY = "USD"


def shipping_fee() -> float:
    """Flat shipping fee charged on every order."""
    return float(os.environ.get("HARBORCART_SHIPPING_FEE", DEFAULT_SHIPPING_FEE))


def order_currency() -> str:
    return os.environ.get("HARBORCART_CURRENCY", DEFAULT_CURRENCY)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class CheckoutStep(Enum):
    CART_SELECTION = "cart_selection"
    ADMIN_FEEDBACK = "admin_feedback"
    PAYMENT = "payment"
    COMPLETED = "completed"


class PaymentChoice(Enum):
    CASH = "cash"
    PAYPAL = "paypal"


class NextAction(Enum):
    RETRY = "retry"
    GO_TO_ORDERS = "go_to_orders"


_STEP_FOR_STATUS = {
    OrderStatus.ORDER_REQUEST: CheckoutStep.ADMIN_FEEDBACK,
    OrderStatus.ORDER_CONFIRMED: CheckoutStep.PAYMENT,
    OrderStatus.PAYMENT_REQUEST: CheckoutStep.PAYMENT,
    OrderStatus.PAYMENT_CONFIRMED: CheckoutStep.PAYMENT,
    OrderStatus.PAYPAL_PAID: CheckoutStep.COMPLETED,
    OrderStatus.PAY_IN_CASH: CheckoutStep.COMPLETED,
    OrderStatus.DELIVERED: CheckoutStep.COMPLETED,
}

_RECOVERY_ACTIONS = (NextAction.RETRY, NextAction.GO_TO_ORDERS)


# ---------------------------------------------------------------------------
# Inputs and outcomes
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class BuyerContext:
    """Who is checking out, and what their cart held when the session began."""

    user_id: str
    user_email: str
    user_name: str | None = None
    ship_name: str | None = None
    phone_number: str | None = None
    cart: tuple[dict, ...] = ()

    @classmethod
    def load(cls, user_id: str, user_email: str, **profile) -> "BuyerContext":
        """Snapshot the buyer's cart from the cart store."""
        return cls(
            user_id=user_id,
            user_email=user_email,
            cart=tuple(get_cart_store().get_cart(user_id)),
            **profile,
        )


@dataclass(frozen=True)
class ReconciliationView:
    """The freshly read order together with its consistency report."""

    order: Order
    report: ConsistencyReport

    @property
    def can_confirm(self) -> bool:
        return self.report.holds and parse_status(self.order.status) == OrderStatus.ORDER_REQUEST

    @property
    def notice(self) -> str | None:
        if self.report.holds:
            return None
        return "Please review your order again before confirming: " + "; ".join(self.report.messages)


@dataclass(frozen=True)
class ConfirmationOutcome:
    order_id: str
    confirmed: bool
    report: ConsistencyReport


@dataclass(frozen=True)
class PaymentOutcome:
    success: bool
    method: PaymentChoice
    status: str | None = None
    provider_order_id: str | None = None
    approve_url: str | None = None
    failure_reason: str | None = None
    next_actions: tuple[NextAction, ...] = field(default_factory=tuple)


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------
class CheckoutOrchestrator:
    """Sequences one buyer's checkout, enforcing the order's guards at each step."""

    def __init__(self, buyer: BuyerContext, order_id: str | None = None, step: CheckoutStep | None = None):
        self.buyer = buyer
        self.order_id = order_id
        if step is None:
            step = CheckoutStep.ADMIN_FEEDBACK if order_id else CheckoutStep.CART_SELECTION
        self.step = step

    @classmethod
    def resume(cls, buyer: BuyerContext, order_id: str) -> "CheckoutOrchestrator":
        """Pick up an existing order at the step its status implies."""
        orchestrator = cls(buyer, order_id=order_id)
        order = orchestrator._load()
        orchestrator.step = _STEP_FOR_STATUS[parse_status(order.status)]
        return orchestrator

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _require_order(self) -> str:
        if self.order_id is None:
            raise ValidationError({"order_id": ["No order has been submitted yet"]})
        return self.order_id

    def _load(self) -> Order:
        order = current_domain.repository_for(Order).get(self._require_order())
        if str(order.user_id) != str(self.buyer.user_id):
            raise ValidationError({"order_id": ["This order belongs to another buyer"]})
        return order

    def _clear_cart(self) -> None:
        try:
            get_cart_store().clear_cart(self.buyer.user_id)
        except CartStoreError as exc:
            logger.warning(
                "Could not clear the buyer's cart",
                user_id=str(self.buyer.user_id),
                order_id=self.order_id,
                error=str(exc),
            )

    def _process(self, command):
        return current_domain.process(command, asynchronous=False)

    # -------------------------------------------------------------------
    # Step 1: submission
    # -------------------------------------------------------------------
    def submit_review(
        self,
        selected_product_ids: list[str],
        delivery_details: dict,
        message: str | None = None,
    ) -> str:
        """Place an order from the selected cart lines and return its id."""
        if self.step != CheckoutStep.CART_SELECTION:
            raise ValidationError({"step": ["An order has already been submitted in this checkout"]})

        selected_ids = [str(product_id) for product_id in selected_product_ids or []]
        lines = [dict(line) for line in self.buyer.cart if str(line.get("product_id")) in selected_ids]
        if not lines:
            raise ValidationError({"items": ["Select at least one item to place an order"]})
        missing = set(selected_ids) - {str(line.get("product_id")) for line in lines}
        if missing:
            raise ValidationError({"items": [f"Not in your cart: {', '.join(sorted(missing))}"]})

        # Fail fast on incomplete delivery details, before anything is written
        build_delivery_details(delivery_details)

        order_id = self._process(
            PlaceOrder(
                user_id=self.buyer.user_id,
                user_email=self.buyer.user_email,
                user_name=self.buyer.user_name,
                ship_name=self.buyer.ship_name,
                phone_number=self.buyer.phone_number,
                items=json.dumps(lines),
                delivery_details=json.dumps(delivery_details),
                message=message,
                shipping_fee=shipping_fee(),
                currency=order_currency(),
            )
        )
        self.order_id = order_id
        self.step = CheckoutStep.ADMIN_FEEDBACK
        self._clear_cart()
        logger.info("Checkout submitted for review", order_id=order_id, user_id=str(self.buyer.user_id))
        return order_id

    # -------------------------------------------------------------------
    # Step 2: reconciliation
    # -------------------------------------------------------------------
    def reconcile(self) -> ReconciliationView:
        order = self._load()
        report = check_consistency(order.lines, current_prices_for(order))
        return ReconciliationView(order=order, report=report)

    def adjust_quantity(self, product_id: str, quantity: int) -> int:
        self._load()
        return self._process(
            AdjustItemQuantity(order_id=self.order_id, product_id=product_id, quantity=quantity)
        )

    def set_selection(self, product_id: str, selected: bool) -> None:
        self._load()
        self._process(SetItemSelection(order_id=self.order_id, product_id=product_id, selected=selected))

    def remove_item(self, product_id: str) -> bool:
        """Remove a line. Returns True when that emptied and deleted the order."""
        self._load()
        deleted = self._process(RemoveOrderItem(order_id=self.order_id, product_id=product_id))
        if deleted:
            self.order_id = None
            self.step = CheckoutStep.CART_SELECTION
        return deleted

    def update_delivery_details(self, delivery_details: dict) -> None:
        self._load()
        self._process(UpdateDeliveryDetails(order_id=self.order_id, delivery_details=json.dumps(delivery_details)))

    def post_message(self, text: str | None = None, image_url: str | None = None) -> PostedMessage:
        self._load()
        return self._process(
            PostMessage(order_id=self.order_id, sender=Sender.USER.value, text=text, image_url=image_url)
        )

    def remove_message(self, message_id: int) -> None:
        self._load()
        self._process(RemoveMessage(order_id=self.order_id, message_id=message_id, removed_by=Sender.USER.value))

    # -------------------------------------------------------------------
    # Step 3: confirmation
    # -------------------------------------------------------------------
    def send_order_confirmation(self) -> ConfirmationOutcome:
        """Confirm the order if it is consistent; otherwise write nothing."""
        view = self.reconcile()
        if not view.can_confirm:
            logger.info(
                "Order confirmation refused",
                order_id=self.order_id,
                status=view.order.status,
                issues=len(view.report.issues),
            )
            return ConfirmationOutcome(order_id=self.order_id, confirmed=False, report=view.report)

        self._process(SendOrderConfirmation(order_id=self.order_id, confirmed_by=self.buyer.user_email))
        self._clear_cart()
        self.step = CheckoutStep.PAYMENT
        return ConfirmationOutcome(order_id=self.order_id, confirmed=True, report=view.report)

    # -------------------------------------------------------------------
    # Step 4: payment
    # -------------------------------------------------------------------
    def pay(self, method: str | PaymentChoice) -> PaymentOutcome:
        """Pay in cash, or open a PayPal order the buyer must approve."""
        try:
            method = PaymentChoice(method)
        except ValueError:
            raise ValidationError({"method": [f"Unknown payment method: {method}"]}) from None
        self._load()

        if method == PaymentChoice.CASH:
            self._process(PayInCash(order_id=self.order_id, changed_by=self.buyer.user_email))
            self.step = CheckoutStep.COMPLETED
            return PaymentOutcome(success=True, method=method, status=OrderStatus.PAY_IN_CASH.value)

        result = self._process(StartPayPalPayment(order_id=self.order_id))
        if not result.success:
            return PaymentOutcome(
                success=False,
                method=method,
                failure_reason=result.failure_reason,
                next_actions=_RECOVERY_ACTIONS,
            )
        return PaymentOutcome(
            success=True,
            method=method,
            status=OrderStatus.PAYMENT_CONFIRMED.value,
            provider_order_id=result.provider_order_id,
            approve_url=result.approve_url,
        )

    def complete_paypal(self, provider_order_id: str, approved: bool = True) -> PaymentOutcome:
        """Handle the buyer's return from PayPal.

        A cancelled or failed payment leaves the order untouched and offers
        the buyer to retry or go to their orders.
        """
        order = self._load()
        if not approved:
            logger.info("PayPal payment cancelled by buyer", order_id=self.order_id)
            return PaymentOutcome(
                success=False,
                method=PaymentChoice.PAYPAL,
                status=order.status,
                provider_order_id=provider_order_id,
                failure_reason="Payment was cancelled",
                next_actions=_RECOVERY_ACTIONS,
            )

        capture = self._process(RecordPayPalPayment(order_id=self.order_id, paypal_order_id=provider_order_id))
        if not capture.success:
            return PaymentOutcome(
                success=False,
                method=PaymentChoice.PAYPAL,
                status=order.status,
                provider_order_id=provider_order_id,
                failure_reason=capture.failure_reason,
                next_actions=_RECOVERY_ACTIONS,
            )

        self.step = CheckoutStep.COMPLETED
        return PaymentOutcome(
            success=True,
            method=PaymentChoice.PAYPAL,
            status=OrderStatus.PAYPAL_PAID.value,
            provider_order_id=provider_order_id,
        )

    # -------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------
    def cancel(self) -> None:
        """Return to the cart. Allowed only before the order leaves review; nothing is deleted."""
        if self.order_id is not None:
            order = self._load()
            if parse_status(order.status) != OrderStatus.ORDER_REQUEST:
                raise ValidationError({"status": ["Only an order awaiting review can be cancelled"]})
        logger.info("Checkout cancelled", order_id=self.order_id, user_id=str(self.buyer.user_id))
        self.order_id = None
        self.step = CheckoutStep.CART_SELECTION
