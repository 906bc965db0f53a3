"""Shared BDD fixtures and step definitions for order review and payment."""

import json

import pytest
from ordering.checkout.orchestrator import BuyerContext, CheckoutOrchestrator
from ordering.order.order import Order
from ordering.order.payment import ConfirmPayment
from ordering.order.placement import PlaceOrder
from ordering.order.review import AnnotateOrderItems
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

USER_ID = "user-bdd-001"

_CART = [
    {"product_id": "prod-a", "name": "Coffee Beans", "quantity": 5, "unit_price": 12.0},
    {"product_id": "prod-b", "name": "Oat Milk", "quantity": 4, "unit_price": 2.5},
    {"product_id": "prod-c", "name": "Batteries AA", "quantity": 2, "unit_price": 6.0},
]

_ONBOARD = {"option": "onboard", "port_name": "MSC Aurora", "expected_shipping_date": "2025-08-01"}


def load_order(order_id):
    return current_domain.repository_for(Order).get(order_id)


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@pytest.fixture()
def outcome():
    """Container for results returned by the step under test."""
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a crew member with coffee, oat milk and batteries in their cart", target_fixture="checkout")
def crew_member_with_cart(catalog, cart_store, sink, paypal):
    for line in _CART:
        catalog.set_price(line["product_id"], line["unit_price"])
    cart_store.replace_cart(USER_ID, _CART)
    return CheckoutOrchestrator(BuyerContext.load(USER_ID, "bosun@example.com", ship_name="MV Northern Star"))


@given(parsers.cfparse('they submitted "{product_ids}" for review'), target_fixture="checkout")
def submitted_for_review(checkout, product_ids):
    checkout.submit_review(product_ids.split(","), _ONBOARD)
    return checkout


@given(parsers.cfparse('staff marked "{product_id}" as "{verdict}" with quantity {quantity:d}'))
def staff_marked_with_quantity(checkout, product_id, verdict, quantity):
    current_domain.process(
        AnnotateOrderItems(
            order_id=checkout.order_id,
            annotations=json.dumps([{"product_id": product_id, "admin_status": verdict, "admin_quantity": quantity}]),
            annotated_by="Admin",
        ),
        asynchronous=False,
    )


@given(parsers.cfparse('staff marked "{product_id}" as "{verdict}"'))
def staff_marked(checkout, product_id, verdict):
    current_domain.process(
        AnnotateOrderItems(
            order_id=checkout.order_id,
            annotations=json.dumps([{"product_id": product_id, "admin_status": verdict}]),
            annotated_by="Admin",
        ),
        asynchronous=False,
    )


@given("the order confirmation was sent")
def confirmation_was_sent(checkout):
    assert checkout.send_order_confirmation().confirmed


@given("staff confirmed the payment")
def staff_confirmed_payment(checkout):
    current_domain.process(ConfirmPayment(order_id=checkout.order_id, confirmed_by="Admin"), asynchronous=False)


@given("they paid in cash")
def paid_in_cash(checkout):
    assert checkout.pay("cash").success


@given("they paid through PayPal")
def paid_through_paypal(checkout, outcome):
    started = checkout.pay("paypal")
    outcome["provider_order_id"] = started.provider_order_id
    assert checkout.complete_paypal(started.provider_order_id).success


@given("an order under review", target_fixture="order_id")
def order_under_review():
    return current_domain.process(
        PlaceOrder(
            user_id=USER_ID,
            user_email="bosun@example.com",
            items=json.dumps(_CART[:1]),
            delivery_details=json.dumps(_ONBOARD),
            shipping_fee=20.0,
        ),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(checkout, status):
    assert load_order(checkout.order_id).status == status


@then(parsers.cfparse('the order shows as "{label}"'))
def order_label_is(checkout, label):
    assert load_order(checkout.order_id).status_label == label


@then(parsers.cfparse("the order has {count:d} lines"))
def order_has_n_lines(checkout, count):
    assert len(load_order(checkout.order_id).lines) == count


@then(parsers.cfparse('every line is "{verdict}"'))
def every_line_is(checkout, verdict):
    assert {line.admin_status for line in load_order(checkout.order_id).lines} == {verdict}


@then(parsers.cfparse('the delivery port is "{port_name}"'))
def delivery_port_is(checkout, port_name):
    assert load_order(checkout.order_id).delivery_details.port_name == port_name


@then("the cart is empty")
def cart_is_empty(cart_store):
    assert cart_store.get_cart(USER_ID) == []


@then(parsers.cfparse("the status history has {count:d} entries"))
def history_has_n_entries(checkout, count):
    assert len(load_order(checkout.order_id).history) == count


@then(parsers.cfparse("the order total is {amount:g}"))
def order_total_is(checkout, amount):
    assert load_order(checkout.order_id).pricing.total_amount == pytest.approx(amount)


@then("the confirmation is refused")
def confirmation_refused(outcome):
    assert outcome["confirmation"].confirmed is False


@then(parsers.cfparse('the buyer received {count:d} "{code}" notice'))
def buyer_received_notices(checkout, sink, count, code):
    sent = [notice for notice in sink.sent_for(checkout.order_id) if notice.code == code]
    assert len(sent) == count


@then("the message action fails with a validation error")
def message_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)
