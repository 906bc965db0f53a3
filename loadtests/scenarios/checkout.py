"""Checkout load test scenarios.

Stateful SequentialTaskSet journeys that take a seeded cart through staff
review, confirmation, payment and delivery. The simulated user plays both
the crew member and the reviewing staff.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import buyer_message, cart_lines, crew_member, delivery_details, ship_name
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import CheckoutState


class _CheckoutJourney(SequentialTaskSet):
    """Seed a cart and submit all of it for review."""

    def on_start(self):
        user_id, email = crew_member()
        self.state = CheckoutState(user_id=user_id, user_email=email)

    def _checkout_url(self, suffix: str = "") -> str:
        return f"/checkout/{self.state.user_id}/orders/{self.state.order_id}{suffix}"

    def seed_and_submit(self):
        lines = cart_lines()
        with self.client.post(
            f"/sandbox/carts/{self.state.user_id}",
            json={"items": lines},
            catch_response=True,
            name="POST /sandbox/carts/{user_id}",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Seed cart failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()
                return
        self.state.product_ids = [line["product_id"] for line in lines]

        with self.client.post(
            f"/checkout/{self.state.user_id}/review",
            json={
                "user_email": self.state.user_email,
                "ship_name": ship_name(),
                "selected_product_ids": self.state.product_ids,
                "delivery_details": delivery_details(),
                "message": buyer_message(),
            },
            catch_response=True,
            name="POST /checkout/{user_id}/review",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["order_id"]
                self.state.current_status = "Order"
            else:
                resp.failure(f"Submit review failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    def annotate(self, annotations: list[dict]):
        with self.client.put(
            f"/admin/orders/{self.state.order_id}/items",
            json={"annotations": annotations},
            catch_response=True,
            name="PUT /admin/orders/{id}/items",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Annotate failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    def confirm(self):
        with self.client.post(
            self._checkout_url("/confirmation"),
            catch_response=True,
            name="POST /checkout/{user_id}/orders/{id}/confirmation",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = "Payment(Request)"
            else:
                resp.failure(f"Confirmation refused: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    def open_payment(self):
        with self.client.put(
            f"/admin/orders/{self.state.order_id}/payment-confirmation",
            json={},
            catch_response=True,
            name="PUT /admin/orders/{id}/payment-confirmation",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = "Payment(Confirmed)"
            else:
                resp.failure(f"Payment confirmation failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()


class CashCheckoutJourney(_CheckoutJourney):
    """Review -> Annotate -> Reconcile -> Confirm -> Open payment -> Cash -> Deliver.

    The happy path of a crew member paying on delivery.
    """

    @task
    def submit(self):
        self.seed_and_submit()

    @task
    def staff_review(self):
        self.annotate([{"product_id": pid, "admin_status": "Available"} for pid in self.state.product_ids])

    @task
    def reconcile(self):
        with self.client.get(
            self._checkout_url("/reconciliation"),
            catch_response=True,
            name="GET /checkout/{user_id}/orders/{id}/reconciliation",
        ) as resp:
            if resp.status_code != 200 or not resp.json()["can_confirm"]:
                resp.failure(f"Reconciliation blocked: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def send_confirmation(self):
        self.confirm()

    @task
    def staff_open_payment(self):
        self.open_payment()

    @task
    def pay_in_cash(self):
        with self.client.post(
            self._checkout_url("/payment"),
            json={"method": "cash"},
            catch_response=True,
            name="POST /checkout/{user_id}/orders/{id}/payment",
        ) as resp:
            if resp.status_code == 200 and resp.json()["success"]:
                self.state.current_status = "Pay in Cash"
            else:
                resp.failure(f"Cash payment failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def mark_delivered(self):
        with self.client.put(
            f"/admin/orders/{self.state.order_id}/delivery",
            json={},
            catch_response=True,
            name="PUT /admin/orders/{id}/delivery",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = "Delivered"
            else:
                resp.failure(f"Mark delivered failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class PayPalCheckoutJourney(_CheckoutJourney):
    """Review -> Confirm -> PayPal order -> Capture -> Repeated capture.

    The repeated capture models a buyer refreshing the return page; it must
    leave the order unchanged.
    """

    @task
    def submit(self):
        self.seed_and_submit()

    @task
    def staff_review(self):
        self.annotate([{"product_id": pid, "admin_status": "Available"} for pid in self.state.product_ids])

    @task
    def send_confirmation(self):
        self.confirm()

    @task
    def staff_open_payment(self):
        self.open_payment()

    @task
    def start_paypal(self):
        with self.client.post(
            self._checkout_url("/payment"),
            json={"method": "paypal"},
            catch_response=True,
            name="POST /checkout/{user_id}/orders/{id}/payment",
        ) as resp:
            if resp.status_code == 200 and resp.json()["success"]:
                self.state.provider_order_id = resp.json()["provider_order_id"]
            else:
                resp.failure(f"PayPal order failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def capture(self):
        with self.client.post(
            self._checkout_url("/paypal/capture"),
            json={"paypal_order_id": self.state.provider_order_id},
            catch_response=True,
            name="POST /checkout/{user_id}/orders/{id}/paypal/capture",
        ) as resp:
            if resp.status_code == 200 and resp.json()["success"]:
                self.state.current_status = "PayPal(Paid)"
            else:
                resp.failure(f"Capture failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def capture_again(self):
        with self.client.post(
            self._checkout_url("/paypal/capture"),
            json={"paypal_order_id": self.state.provider_order_id},
            catch_response=True,
            name="POST /checkout/{user_id}/orders/{id}/paypal/capture",
        ) as resp:
            if resp.status_code != 200 or resp.json()["status"] != "PayPal(Paid)":
                resp.failure(f"Repeated capture changed the order: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class ReviewNegotiationJourney(_CheckoutJourney):
    """Review -> Out of stock verdict -> Messages -> Deselect -> Confirm.

    Staff mark one line out of stock; the buyer talks it over, deselects
    the line and confirms the rest.
    """

    def on_start(self):
        super().on_start()
        self.unavailable = None

    @task
    def submit(self):
        self.seed_and_submit()

    @task
    def staff_review(self):
        unavailable = random.choice(self.state.product_ids)
        self.state.product_ids.remove(unavailable)
        self.annotate(
            [{"product_id": unavailable, "admin_status": "Out of Stock"}]
            + [{"product_id": pid, "admin_status": "Available"} for pid in self.state.product_ids]
        )
        self.unavailable = unavailable

    @task
    def staff_message(self):
        with self.client.post(
            f"/admin/orders/{self.state.order_id}/messages",
            json={"text": "One item is out of stock, please deselect it."},
            catch_response=True,
            name="POST /admin/orders/{id}/messages",
        ) as resp:
            if resp.status_code == 201:
                self.state.message_count += 1
            else:
                resp.failure(f"Staff message failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def buyer_reply(self):
        with self.client.post(
            f"/orders/{self.state.order_id}/messages",
            json={"text": buyer_message()},
            catch_response=True,
            name="POST /orders/{id}/messages",
        ) as resp:
            if resp.status_code == 201:
                self.state.message_count += 1
            else:
                resp.failure(f"Buyer message failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def deselect(self):
        with self.client.put(
            f"/orders/{self.state.order_id}/items/{self.unavailable}",
            json={"selected": False},
            catch_response=True,
            name="PUT /orders/{id}/items/{product_id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Deselect failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def send_confirmation(self):
        self.confirm()

    @task
    def review_order(self):
        self.client.get(f"/orders/{self.state.order_id}", name="GET /orders/{id}")

    @task
    def done(self):
        self.interrupt()


class CheckoutUser(HttpUser):
    """Locust user simulating crew checkouts.

    Weighted distribution:
    - 40% Cash checkout through delivery
    - 35% PayPal checkout with a repeated capture
    - 25% Review negotiation with an out of stock line
    """

    wait_time = between(0.5, 2.0)
    tasks = {
        CashCheckoutJourney: 8,
        PayPalCheckoutJourney: 7,
        ReviewNegotiationJourney: 5,
    }
