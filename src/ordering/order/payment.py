"""Order payment: commands and handler.

Staff open payment once an order is confirmed. The buyer then pays in cash
or through PayPal. A PayPal capture is recorded at most once per order; a
repeated success callback finds the order already paid and does nothing.
"""

import structlog
from notifications.templates.codes import NoticeCode
from payments.gateway import get_gateway
from payments.gateway.port import CaptureResult
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.notices import notify_buyer
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class ConfirmPayment:
    order_id = Identifier(required=True)
    confirmed_by = String(required=True, max_length=255)


@ordering.command(part_of="Order")
class PayInCash:
    order_id = Identifier(required=True)
    changed_by = String(required=True, max_length=255)


@ordering.command(part_of="Order")
class StartPayPalPayment:
    order_id = Identifier(required=True)


@ordering.command(part_of="Order")
class RecordPayPalPayment:
    order_id = Identifier(required=True)
    paypal_order_id = String(required=True, max_length=100)
    changed_by = String(default="System (PayPal Capture)", max_length=255)


@ordering.command_handler(part_of=Order)
class PaymentHandler:
    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.confirm_payment(confirmed_by=command.confirmed_by)
        repo.add(order)
        notify_buyer(order, NoticeCode.PAYMENT_CONFIRMED)

    @handle(PayInCash)
    def pay_in_cash(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.pay_in_cash(changed_by=command.changed_by)
        repo.add(order)
        logger.info("Cash payment selected", order_id=str(command.order_id), changed_by=command.changed_by)
        notify_buyer(order, NoticeCode.PAY_IN_CASH)

    @handle(StartPayPalPayment)
    def start_paypal_payment(self, command):
        """Open a provider order for the buyer to approve. Returns the provider result."""
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.assert_payment_open()

        result = get_gateway().create_order(
            order_id=str(order.id),
            amount=order.pricing.total_amount,
            currency=order.pricing.currency,
        )
        if not result.success:
            logger.warning(
                "PayPal order could not be opened",
                order_id=str(order.id),
                reason=result.failure_reason,
            )
            return result

        order.attach_paypal_order(result.provider_order_id)
        repo.add(order)
        return result

    @handle(RecordPayPalPayment)
    def record_paypal_payment(self, command):
        """Capture an approved PayPal order and record the payment. Returns the capture result."""
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if order.has_paypal_payment:
            logger.info("PayPal payment already recorded", order_id=str(order.id))
            return CaptureResult(
                success=True,
                capture_id=order.paypal_capture_id,
                capture_status="ALREADY_CAPTURED",
            )

        order.assert_payment_open()
        if not order.paypal_order_id or order.paypal_order_id != command.paypal_order_id:
            logger.warning(
                "PayPal return does not match the provider order opened for this order",
                order_id=str(order.id),
                expected=order.paypal_order_id,
                received=command.paypal_order_id,
            )
            return CaptureResult(
                success=False,
                failure_reason="PayPal order does not belong to this order",
            )

        capture = get_gateway().capture(order_id=str(order.id), provider_order_id=command.paypal_order_id)
        if not capture.success:
            logger.warning(
                "PayPal capture failed",
                order_id=str(order.id),
                reason=capture.failure_reason,
            )
            return capture

        if order.record_paypal_payment(
            paypal_order_id=command.paypal_order_id,
            paypal_capture_id=capture.capture_id,
            changed_by=command.changed_by,
        ):
            repo.add(order)
            notify_buyer(order, NoticeCode.PAYPAL_PAID)
        return capture
