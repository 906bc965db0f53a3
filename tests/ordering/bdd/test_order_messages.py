"""BDD tests for the order message thread."""

from ordering.order.messaging import PostMessage, RemoveMessage
from ordering.order.order import Order
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/order_messages.feature")


def _post(order_id, sender, text):
    return current_domain.process(
        PostMessage(order_id=order_id, sender=sender, text=text),
        asynchronous=False,
    )


def _thread(order_id):
    return current_domain.repository_for(Order).get(order_id).thread


@given(parsers.cfparse('the buyer posted "{text}"'))
def buyer_posted(order_id, text):
    _post(order_id, "User", text)


@given(parsers.cfparse('staff posted "{text}"'))
def staff_posted(order_id, text):
    _post(order_id, "Admin", text)


@when(parsers.cfparse('the buyer posts "{text}"'))
def buyer_posts(order_id, outcome, text):
    outcome["posted"] = _post(order_id, "User", text)


@when(parsers.cfparse("the buyer tries to delete message {message_id:d}"))
def buyer_deletes(order_id, error, message_id):
    try:
        current_domain.process(
            RemoveMessage(order_id=order_id, message_id=message_id, removed_by="User"),
            asynchronous=False,
        )
    except ValidationError as exc:
        error["exc"] = exc


@then(parsers.cfparse("the message ids are {ids}"))
def message_ids_are(order_id, ids):
    assert [message.sequence for message in _thread(order_id)] == [int(i) for i in ids.split(",")]


@then(parsers.cfparse('the last message was sent by "{sender}"'))
def last_message_sender(order_id, sender):
    assert _thread(order_id)[-1].sender == sender


@then(parsers.cfparse('the last message reads "{text}"'))
def last_message_reads(order_id, text):
    assert _thread(order_id)[-1].text == text


@then("the buyer is told characters were removed")
def buyer_told(outcome):
    assert outcome["posted"].filtered is True
