"""BDD tests for submitting, reconciling and confirming an order."""

import pytest
from ordering.order.order import Order
from protean import current_domain
from protean.exceptions import ObjectNotFoundError
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/order_review.feature")


@when(
    parsers.cfparse('they submit "{product_ids}" for onboard delivery to "{port_name}" on "{shipping_date}"'),
    target_fixture="checkout",
)
def submit_for_review(checkout, product_ids, port_name, shipping_date):
    checkout.submit_review(
        product_ids.split(","),
        {"option": "onboard", "port_name": port_name, "expected_shipping_date": shipping_date},
    )
    return checkout


@when(parsers.cfparse('they deselect "{product_id}"'))
def deselect(checkout, product_id):
    checkout.set_selection(product_id, False)


@when("they send the order confirmation")
def send_confirmation(checkout, outcome):
    outcome["confirmation"] = checkout.send_order_confirmation()


@when(parsers.cfparse('they change the quantity of "{product_id}" to {quantity:d}'))
def change_quantity(checkout, product_id, quantity):
    checkout.adjust_quantity(product_id, quantity)


@when(parsers.cfparse('they remove "{product_id}"'))
def remove_line(checkout, outcome, product_id):
    outcome["order_id"] = checkout.order_id
    outcome["deleted"] = checkout.remove_item(product_id)


@then(parsers.cfparse('the quantity of "{product_id}" is {quantity:d}'))
def quantity_is(checkout, product_id, quantity):
    order = current_domain.repository_for(Order).get(checkout.order_id)
    assert order.find_line(product_id).quantity == quantity


@then("the order no longer exists")
def order_no_longer_exists(outcome):
    assert outcome["deleted"] is True
    with pytest.raises(ObjectNotFoundError):
        current_domain.repository_for(Order).get(outcome["order_id"])
