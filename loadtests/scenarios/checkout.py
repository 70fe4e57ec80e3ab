"""Checkout load test scenarios.

``CustomerJourney`` walks an order from checkout through payment and producer
fulfillment. ``ScarceStockRaceUser`` has every user hammer a single product
so the stock ledger is checked under contention: the only acceptable
outcomes are an order (201) or ``OutOfStock`` (409), and stock must never go
negative.
"""

import random

import requests
from locust import HttpUser, SequentialTaskSet, between, constant_pacing, events, task

from loadtests.data_generators import (
    PRODUCERS,
    SCARCE_PRODUCER,
    SCARCE_PRODUCT,
    cart,
    customer_id,
    order_data,
    payment_data,
    stock_data,
)
from loadtests.helpers.response import error_code, extract_error_detail
from loadtests.helpers.state import OrderState

SCARCE_STOCK = 50
STOCK_PER_PRODUCT = 1_000_000


@events.test_start.add_listener
def seed_stock(environment, **_kwargs):
    """Put every load-test product on the ledger before users start."""
    if environment.host is None:
        return

    for producer_id, prices in PRODUCERS.items():
        for product_id in prices:
            requests.post(
                f"{environment.host}/inventory",
                json=stock_data(product_id, producer_id, STOCK_PER_PRODUCT),
                timeout=10,
            )
    requests.post(
        f"{environment.host}/inventory",
        json=stock_data(SCARCE_PRODUCT, SCARCE_PRODUCER, SCARCE_STOCK),
        timeout=10,
    )


class CheckoutToFulfillmentJourney(SequentialTaskSet):
    """Checkout -> Pay -> Complete payment -> Producer moves the order to completed.

    One in five journeys refunds the payment in full instead of fulfilling,
    which cancels the order and returns its stock.
    """

    def on_start(self):
        self.state = OrderState(customer_id=customer_id())

    @task
    def checkout(self):
        producer_id, items, total = cart()
        self.state.producer_id = producer_id
        self.state.total_amount = total
        with self.client.post(
            "/orders",
            json=order_data(self.state.customer_id, producer_id, items),
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["order"]["id"]
            else:
                resp.failure(f"Checkout failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def create_payment(self):
        with self.client.post(
            "/payments",
            json=payment_data(self.state.order_id, self.state.total_amount, self.state.customer_id),
            catch_response=True,
            name="POST /payments",
        ) as resp:
            if resp.status_code == 201:
                self.state.payment_id = resp.json()["payment"]["id"]
            else:
                resp.failure(f"Create payment failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def complete_payment(self):
        with self.client.patch(
            f"/payments/{self.state.payment_id}/status",
            json={"status": "completed"},
            catch_response=True,
            name="PATCH /payments/{id}/status",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = "confirmed"
            else:
                resp.failure(f"Complete payment failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def refund_or_fulfill(self):
        if random.random() < 0.2:
            with self.client.post(
                f"/payments/{self.state.payment_id}/refund",
                json={"refund_amount": str(self.state.total_amount), "reason": "Load test refund"},
                catch_response=True,
                name="POST /payments/{id}/refund",
            ) as resp:
                if resp.status_code != 200:
                    resp.failure(f"Refund failed: {resp.status_code} {extract_error_detail(resp)}")
            return

        for status in self.state.status_path:
            with self.client.patch(
                f"/orders/{self.state.order_id}/status",
                json={"status": status, "producer_id": self.state.producer_id},
                catch_response=True,
                name="PATCH /orders/{id}/status",
            ) as resp:
                if resp.status_code == 200:
                    self.state.current_status = status
                else:
                    resp.failure(f"Advance to {status} failed: {resp.status_code} {extract_error_detail(resp)}")
                    return

    @task
    def list_my_orders(self):
        self.client.get("/orders", params={"customer_id": self.state.customer_id}, name="GET /orders")
        self.interrupt()


class CustomerJourney(HttpUser):
    tasks = [CheckoutToFulfillmentJourney]
    wait_time = between(0.5, 2)
    weight = 3


class ScarceStockRaceUser(HttpUser):
    """Many customers competing for the last units of one product."""

    wait_time = constant_pacing(0.1)
    weight = 1

    @task
    def grab_last_units(self):
        payload = order_data(
            customer_id(),
            SCARCE_PRODUCER,
            [{"product_id": SCARCE_PRODUCT, "quantity": random.randint(1, 2)}],
        )
        with self.client.post("/orders", json=payload, catch_response=True, name="[RACE] POST /orders") as resp:
            if resp.status_code == 201 or (resp.status_code == 409 and error_code(resp) == "OutOfStock"):
                resp.success()
            else:
                resp.failure(f"Unexpected checkout outcome: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def check_stock_never_negative(self):
        with self.client.get(
            f"/inventory/{SCARCE_PRODUCT}", catch_response=True, name="[RACE] GET /inventory/{id}"
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Stock check failed: {resp.status_code}")
            elif resp.json()["stock_quantity"] < 0:
                resp.failure(f"Stock went negative: {resp.json()['stock_quantity']}")
