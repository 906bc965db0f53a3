"""FastAPI routes for the Ordering domain: checkout, orders and staff review."""

import json

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    AnnotateItemsRequest,
    ConfirmationResponse,
    ConfirmPaymentRequest,
    DeliveryDetailsSchema,
    ItemUpdateResponse,
    LineIssueSchema,
    MarkDeliveredRequest,
    MessageResponse,
    MessageSchema,
    OrderIdResponse,
    OrderLineSchema,
    OrderResponse,
    OrderSummaryResponse,
    PayPalReturnRequest,
    PayRequest,
    PaymentResponse,
    PostMessageRequest,
    ReconciliationResponse,
    RemoveItemResponse,
    StatusChangeSchema,
    StatusResponse,
    SubmitReviewRequest,
    UpdateOrderItemRequest,
)
from ordering.checkout.orchestrator import BuyerContext, CheckoutOrchestrator, PaymentOutcome
from ordering.order.consistency import ConsistencyReport
from ordering.order.delivery import MarkDelivered
from ordering.order.messaging import PostMessage, RemoveMessage
from ordering.order.order import Order
from ordering.order.payment import ConfirmPayment
from ordering.order.reconciliation import (
    RemoveOrderItem,
    UpdateDeliveryDetails,
    UpdateOrderItem,
)
from ordering.order.review import AnnotateOrderItems
from ordering.order.status import Sender, display_status, parse_status


# ---------------------------------------------------------------------------
# Response builders
# ---------------------------------------------------------------------------
def _summary_fields(order: Order) -> dict:
    pricing = order.pricing
    return {
        "order_id": str(order.id),
        "status": order.status,
        "status_label": display_status(order.status),
        "user_email": order.user_email,
        "ship_name": order.ship_name,
        "total_amount": pricing.total_amount if pricing else 0.0,
        "currency": pricing.currency if pricing else "USD",
        "created_at": order.created_at,
    }


def _order_response(order: Order) -> OrderResponse:
    pricing = order.pricing
    details = order.delivery_details
    return OrderResponse(
        **_summary_fields(order),
        user_name=order.user_name,
        items=[OrderLineSchema(**line.as_payload()) for line in order.lines],
        delivery_details=DeliveryDetailsSchema(**details.as_payload()) if details else None,
        messages=[
            MessageSchema(
                id=message.sequence,
                sender=message.sender,
                text=message.text,
                image_url=message.image_url,
                timestamp=message.timestamp,
            )
            for message in order.thread
        ],
        status_history=[
            StatusChangeSchema(
                timestamp=change.timestamp,
                old_status=change.old_status,
                new_status=change.new_status,
                changed_by=change.changed_by,
            )
            for change in order.history
        ],
        subtotal=pricing.subtotal if pricing else 0.0,
        shipping_fee=pricing.shipping_fee if pricing else 0.0,
        tax=pricing.tax if pricing else 0.0,
        payment_method=order.payment_method,
        actual_delivery=order.actual_delivery,
    )


def _issues(report: ConsistencyReport) -> list[LineIssueSchema]:
    return [
        LineIssueSchema(product_id=issue.product_id, reason=issue.reason.value, detail=issue.detail)
        for issue in report.issues
    ]


def _payment_response(outcome: PaymentOutcome) -> PaymentResponse:
    return PaymentResponse(
        success=outcome.success,
        method=outcome.method.value,
        status=outcome.status,
        provider_order_id=outcome.provider_order_id,
        approve_url=outcome.approve_url,
        failure_reason=outcome.failure_reason,
        next_actions=[action.value for action in outcome.next_actions],
    )


def _orchestrator_for(user_id: str, order_id: str) -> CheckoutOrchestrator:
    """Resume a buyer's checkout from the stored order."""
    order = current_domain.repository_for(Order).get(order_id)
    buyer = BuyerContext(
        user_id=user_id,
        user_email=order.user_email,
        user_name=order.user_name,
        ship_name=order.ship_name,
        phone_number=order.phone_number,
    )
    return CheckoutOrchestrator.resume(buyer, order_id)


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("/{user_id}/review", status_code=201, response_model=OrderIdResponse)
async def submit_review(user_id: str, body: SubmitReviewRequest) -> OrderIdResponse:
    buyer = BuyerContext.load(
        user_id,
        body.user_email,
        user_name=body.user_name,
        ship_name=body.ship_name,
        phone_number=body.phone_number,
    )
    orchestrator = CheckoutOrchestrator(buyer)
    order_id = orchestrator.submit_review(
        body.selected_product_ids,
        body.delivery_details.model_dump(exclude_none=True),
        message=body.message,
    )
    return OrderIdResponse(order_id=order_id)


@checkout_router.get("/{user_id}/orders/{order_id}/reconciliation", response_model=ReconciliationResponse)
async def reconcile(user_id: str, order_id: str) -> ReconciliationResponse:
    view = _orchestrator_for(user_id, order_id).reconcile()
    return ReconciliationResponse(
        order=_order_response(view.order),
        can_confirm=view.can_confirm,
        notice=view.notice,
        issues=_issues(view.report),
    )


@checkout_router.post("/{user_id}/orders/{order_id}/confirmation", response_model=ConfirmationResponse)
async def send_order_confirmation(user_id: str, order_id: str):
    outcome = _orchestrator_for(user_id, order_id).send_order_confirmation()
    response = ConfirmationResponse(
        order_id=outcome.order_id,
        confirmed=outcome.confirmed,
        issues=_issues(outcome.report),
    )
    if not outcome.confirmed:
        return JSONResponse(status_code=409, content=response.model_dump())
    return response


@checkout_router.post("/{user_id}/orders/{order_id}/payment", response_model=PaymentResponse)
async def pay(user_id: str, order_id: str, body: PayRequest) -> PaymentResponse:
    outcome = _orchestrator_for(user_id, order_id).pay(body.method)
    return _payment_response(outcome)


@checkout_router.post("/{user_id}/orders/{order_id}/paypal/capture", response_model=PaymentResponse)
async def complete_paypal(user_id: str, order_id: str, body: PayPalReturnRequest) -> PaymentResponse:
    outcome = _orchestrator_for(user_id, order_id).complete_paypal(body.paypal_order_id, approved=body.approved)
    return _payment_response(outcome)


@checkout_router.post("/{user_id}/orders/{order_id}/cancel", response_model=StatusResponse)
async def cancel_checkout(user_id: str, order_id: str) -> StatusResponse:
    _orchestrator_for(user_id, order_id).cancel()
    return StatusResponse()


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=list[OrderSummaryResponse])
async def list_orders(user_email: str | None = None, status: str | None = None) -> list[OrderSummaryResponse]:
    """List orders, newest first, optionally filtered by buyer and status."""
    filters = {}
    if user_email:
        filters["user_email"] = user_email
    if status:
        filters["status"] = parse_status(status).value

    query = current_domain.repository_for(Order)._dao.query
    if filters:
        query = query.filter(**filters)
    orders = sorted(query.all().items, key=lambda order: order.created_at, reverse=True)
    return [OrderSummaryResponse(**_summary_fields(order)) for order in orders]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    return _order_response(current_domain.repository_for(Order).get(order_id))


@order_router.put("/{order_id}/items/{product_id}", response_model=ItemUpdateResponse)
async def update_order_item(order_id: str, product_id: str, body: UpdateOrderItemRequest) -> ItemUpdateResponse:
    line = current_domain.process(
        UpdateOrderItem(order_id=order_id, product_id=product_id, quantity=body.quantity, selected=body.selected),
        asynchronous=False,
    )
    return ItemUpdateResponse(quantity=line.quantity, selected=line.selected)


@order_router.delete("/{order_id}/items/{product_id}", response_model=RemoveItemResponse)
async def remove_order_item(order_id: str, product_id: str) -> RemoveItemResponse:
    deleted = current_domain.process(
        RemoveOrderItem(order_id=order_id, product_id=product_id),
        asynchronous=False,
    )
    return RemoveItemResponse(order_deleted=bool(deleted))


@order_router.put("/{order_id}/delivery", response_model=StatusResponse)
async def update_delivery_details(order_id: str, body: DeliveryDetailsSchema) -> StatusResponse:
    current_domain.process(
        UpdateDeliveryDetails(order_id=order_id, delivery_details=json.dumps(body.model_dump(exclude_none=True))),
        asynchronous=False,
    )
    return StatusResponse()


@order_router.post("/{order_id}/messages", status_code=201, response_model=MessageResponse)
async def post_buyer_message(order_id: str, body: PostMessageRequest) -> MessageResponse:
    posted = current_domain.process(
        PostMessage(order_id=order_id, sender=Sender.USER.value, text=body.text, image_url=body.image_url),
        asynchronous=False,
    )
    return MessageResponse(message_id=posted.message_id, filtered=posted.filtered)


@order_router.delete("/{order_id}/messages/{message_id}", response_model=StatusResponse)
async def remove_buyer_message(order_id: str, message_id: int) -> StatusResponse:
    current_domain.process(
        RemoveMessage(order_id=order_id, message_id=message_id, removed_by=Sender.USER.value),
        asynchronous=False,
    )
    return StatusResponse()


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin/orders", tags=["admin"])


@admin_router.put("/{order_id}/items", response_model=StatusResponse)
async def annotate_items(order_id: str, body: AnnotateItemsRequest) -> StatusResponse:
    current_domain.process(
        AnnotateOrderItems(
            order_id=order_id,
            annotations=json.dumps([annotation.model_dump() for annotation in body.annotations]),
            annotated_by=body.annotated_by,
        ),
        asynchronous=False,
    )
    return StatusResponse()


@admin_router.put("/{order_id}/payment-confirmation", response_model=StatusResponse)
async def confirm_payment(order_id: str, body: ConfirmPaymentRequest) -> StatusResponse:
    current_domain.process(
        ConfirmPayment(order_id=order_id, confirmed_by=body.confirmed_by),
        asynchronous=False,
    )
    return StatusResponse()


@admin_router.put("/{order_id}/delivery", response_model=StatusResponse)
async def mark_delivered(order_id: str, body: MarkDeliveredRequest) -> StatusResponse:
    current_domain.process(
        MarkDelivered(order_id=order_id, changed_by=body.changed_by, delivered_on=body.delivered_on),
        asynchronous=False,
    )
    return StatusResponse()


@admin_router.post("/{order_id}/messages", status_code=201, response_model=MessageResponse)
async def post_staff_message(order_id: str, body: PostMessageRequest) -> MessageResponse:
    posted = current_domain.process(
        PostMessage(order_id=order_id, sender=Sender.ADMIN.value, text=body.text, image_url=body.image_url),
        asynchronous=False,
    )
    return MessageResponse(message_id=posted.message_id, filtered=posted.filtered)


@admin_router.delete("/{order_id}/messages/{message_id}", response_model=StatusResponse)
async def remove_staff_message(order_id: str, message_id: int) -> StatusResponse:
    current_domain.process(
        RemoveMessage(order_id=order_id, message_id=message_id, removed_by=Sender.ADMIN.value),
        asynchronous=False,
    )
    return StatusResponse()
