"""Tests for staff annotation and buyer reconciliation edits on an order under review."""

import pytest
from ordering.order.events import (
    DeliveryDetailsUpdated,
    ItemQuantityAdjusted,
    ItemSelectionChanged,
    OrderItemRemoved,
    OrderItemsAnnotated,
)
from ordering.order.order import Order
from ordering.order.status import AdminStatus
from protean.exceptions import ValidationError


def _make_order():
    order = Order.place(
        user_id="user-001",
        user_email="chief@example.com",
        items_data=[
            {"product_id": "prod-a", "name": "Coffee Beans", "quantity": 5, "unit_price": 12.0},
            {"product_id": "prod-b", "name": "Oat Milk", "quantity": 4, "unit_price": 2.5},
            {"product_id": "prod-c", "name": "Batteries AA", "quantity": 2, "unit_price": 6.0},
        ],
        delivery_details={"option": "onboard", "port_name": "MSC Aurora", "expected_shipping_date": "2025-08-01"},
        shipping_fee=20.0,
    )
    order._events.clear()
    return order


def _annotate(order, **verdicts):
    order.annotate_items(
        [{"product_id": pid, **verdict} for pid, verdict in verdicts.items()],
        annotated_by="Admin",
    )
    order._events.clear()


class TestAnnotation:
    def test_available_keeps_requested_quantity(self):
        order = _make_order()
        order.annotate_items([{"product_id": "prod-a", "admin_status": "Available"}], annotated_by="Admin")
        line = order.find_line("prod-a")
        assert line.admin_status == AdminStatus.AVAILABLE.value
        assert line.admin_quantity == 5

    def test_limited_records_approved_quantity(self):
        order = _make_order()
        order.annotate_items(
            [{"product_id": "prod-b", "admin_status": "Limited", "admin_quantity": 2}],
            annotated_by="Admin",
        )
        assert order.find_line("prod-b").admin_quantity == 2

    def test_limited_quantity_alias(self):
        order = _make_order()
        order.annotate_items(
            [{"product_id": "prod-b", "admin_status": "Limited Quantity", "admin_quantity": 2}],
            annotated_by="Admin",
        )
        assert order.find_line("prod-b").admin_status == AdminStatus.LIMITED.value

    def test_out_of_stock_zeroes_quantity(self):
        order = _make_order()
        order.annotate_items([{"product_id": "prod-c", "admin_status": "Out of Stock"}], annotated_by="Admin")
        assert order.find_line("prod-c").admin_quantity == 0

    def test_alternative_offer_keeps_text(self):
        order = _make_order()
        order.annotate_items(
            [{"product_id": "prod-b", "admin_status": "Alternative Offer", "alternative_offer": "Soy milk 1L"}],
            annotated_by="Admin",
        )
        line = order.find_line("prod-b")
        assert line.alternative_offer == "Soy milk 1L"
        assert line.admin_quantity is None

    def test_raises_annotated_event(self):
        order = _make_order()
        order.annotate_items([{"product_id": "prod-a", "admin_status": "Available"}], annotated_by="Admin")
        assert isinstance(order._events[-1], OrderItemsAnnotated)

    def test_unknown_product_rejects_whole_batch(self):
        order = _make_order()
        with pytest.raises(ValidationError):
            order.annotate_items(
                [
                    {"product_id": "prod-a", "admin_status": "Out of Stock"},
                    {"product_id": "prod-zzz", "admin_status": "Available"},
                ],
                annotated_by="Admin",
            )
        assert order.find_line("prod-a").admin_status == AdminStatus.PENDING_REVIEW.value

    def test_unknown_verdict_rejected(self):
        order = _make_order()
        with pytest.raises(ValidationError):
            order.annotate_items([{"product_id": "prod-a", "admin_status": "Maybe"}], annotated_by="Admin")

    def test_annotation_does_not_change_status(self):
        order = _make_order()
        _annotate(order, **{"prod-a": {"admin_status": "Available"}})
        assert order.status == "Order"
        assert len(order.history) == 1


class TestAdjustQuantity:
    def test_available_line_follows_request(self):
        order = _make_order()
        _annotate(order, **{"prod-a": {"admin_status": "Available"}})
        assert order.adjust_item_quantity("prod-a", 8) == 8
        line = order.find_line("prod-a")
        assert line.quantity == 8
        assert line.admin_quantity == 8
        assert isinstance(order._events[-1], ItemQuantityAdjusted)

    def test_limited_line_is_capped(self):
        order = _make_order()
        _annotate(order, **{"prod-b": {"admin_status": "Limited", "admin_quantity": 2}})
        assert order.adjust_item_quantity("prod-b", 10) == 2
        assert order.find_line("prod-b").quantity == 2

    def test_quantity_never_below_one(self):
        order = _make_order()
        _annotate(order, **{"prod-a": {"admin_status": "Available"}})
        assert order.adjust_item_quantity("prod-a", 0) == 1

    def test_no_change_raises_no_event(self):
        order = _make_order()
        _annotate(order, **{"prod-a": {"admin_status": "Available"}})
        order.adjust_item_quantity("prod-a", 5)
        assert order._events == []

    @pytest.mark.parametrize("verdict", ["Pending Review", "Out of Stock", "Alternative Offer"])
    def test_other_verdicts_are_locked(self, verdict):
        order = _make_order()
        if verdict != "Pending Review":
            _annotate(order, **{"prod-a": {"admin_status": verdict}})
        with pytest.raises(ValidationError):
            order.adjust_item_quantity("prod-a", 3)


class TestSelection:
    def test_deselect(self):
        order = _make_order()
        order.set_item_selection("prod-b", False)
        assert [str(line.product_id) for line in order.selected_lines] == ["prod-a", "prod-c"]
        assert isinstance(order._events[-1], ItemSelectionChanged)

    def test_reselect(self):
        order = _make_order()
        order.set_item_selection("prod-b", False)
        order.set_item_selection("prod-b", True)
        assert len(order.selected_lines) == 3

    def test_same_selection_is_a_no_op(self):
        order = _make_order()
        order.set_item_selection("prod-a", True)
        assert order._events == []


class TestRemoveItem:
    def test_remove_line(self):
        order = _make_order()
        order.remove_item("prod-c")
        assert [str(line.product_id) for line in order.lines] == ["prod-a", "prod-b"]
        assert order._events[-1].remaining_items == 2
        assert isinstance(order._events[-1], OrderItemRemoved)

    def test_last_line_cannot_be_removed_in_place(self):
        order = _make_order()
        order.remove_item("prod-c")
        order.remove_item("prod-b")
        assert order.holds_only("prod-a")
        with pytest.raises(ValidationError):
            order.remove_item("prod-a")

    def test_unknown_line_rejected(self):
        order = _make_order()
        with pytest.raises(ValidationError):
            order.remove_item("prod-zzz")


class TestDeliveryEdits:
    def test_switch_to_alternative(self):
        order = _make_order()
        order.update_delivery_details({"option": "alternative", "address": "Pier 4, Rotterdam", "postal_code": "3011"})
        assert order.delivery_details.option == "alternative"
        assert order.delivery_details.port_name is None
        assert isinstance(order._events[-1], DeliveryDetailsUpdated)

    def test_incomplete_update_keeps_previous_details(self):
        order = _make_order()
        with pytest.raises(ValidationError):
            order.update_delivery_details({"option": "alternative", "address": "Pier 4, Rotterdam"})
        assert order.delivery_details.port_name == "MSC Aurora"
