"""BDD tests for paying for and delivering a confirmed order."""

from ordering.checkout.orchestrator import NextAction
from ordering.order.delivery import MarkDelivered
from ordering.order.order import Order
from protean import current_domain
from pytest_bdd import scenarios, then, when

scenarios("features/order_payment.feature")


def _history_length(order_id):
    return len(current_domain.repository_for(Order).get(order_id).history)


@when("they pay in cash")
def pay_in_cash(checkout, outcome):
    outcome["history_before"] = _history_length(checkout.order_id)
    outcome["payment"] = checkout.pay("cash")


@when("they pay through PayPal and approve")
def pay_through_paypal(checkout, outcome):
    started = checkout.pay("paypal")
    outcome["payment"] = checkout.complete_paypal(started.provider_order_id)


@when("they pay through PayPal and cancel")
def cancel_at_paypal(checkout, outcome):
    started = checkout.pay("paypal")
    outcome["payment"] = checkout.complete_paypal(started.provider_order_id, approved=False)


@when("the PayPal success callback arrives again")
def repeated_callback(checkout, outcome):
    outcome["payment"] = checkout.complete_paypal(outcome["provider_order_id"])


@when("staff mark the order delivered")
def staff_mark_delivered(checkout):
    current_domain.process(MarkDelivered(order_id=checkout.order_id, changed_by="Admin"), asynchronous=False)


@then("the payment added 1 history entry")
def payment_added_one_entry(checkout, outcome):
    assert _history_length(checkout.order_id) == outcome["history_before"] + 1


@then("they are offered to retry or go to their orders")
def offered_recovery(outcome):
    assert outcome["payment"].success is False
    assert outcome["payment"].next_actions == (NextAction.RETRY, NextAction.GO_TO_ORDERS)
