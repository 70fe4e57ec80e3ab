"""Faker-based data generators for Locust load test scenarios.

Product ids and prices match ``loadtests/catalog.json``; start the API with
``MARKETPLACE_CATALOG=loadtests/catalog.json`` so checkouts resolve them.
"""

import random
import uuid
from decimal import Decimal

from faker import Faker

fake = Faker()

PRODUCERS = {
    "lt-farm-001": {"lt-eggs": Decimal("4.50"), "lt-honey": Decimal("12.00"), "lt-carrots": Decimal("2.25")},
    "lt-farm-002": {"lt-apples": Decimal("3.10"), "lt-cider": Decimal("8.75")},
}

# Scarce product that racing customers compete for
SCARCE_PRODUCER = "lt-farm-002"
SCARCE_PRODUCT = "lt-saffron"


def customer_id() -> str:
    return f"lt-cust-{uuid.uuid4().hex[:8]}"


def stock_data(product_id: str, producer_id: str, quantity: int) -> dict:
    return {"product_id": product_id, "producer_id": producer_id, "quantity": quantity}


def cart(producer_id: str | None = None, max_lines: int = 3) -> tuple[str, list[dict], Decimal]:
    """Return (producer_id, items, expected total) for a random cart."""
    producer_id = producer_id or random.choice(list(PRODUCERS))
    prices = PRODUCERS[producer_id]
    product_ids = random.sample(list(prices), k=random.randint(1, min(max_lines, len(prices))))
    items = [{"product_id": product_id, "quantity": random.randint(1, 3)} for product_id in product_ids]
    total = sum((prices[item["product_id"]] * item["quantity"] for item in items), Decimal("0.00"))
    return producer_id, items, total


def order_data(customer: str, producer_id: str, items: list[dict]) -> dict:
    """PlaceOrderRequest payload; roughly a third of orders ask for delivery."""
    payload = {"customer_id": customer, "producer_id": producer_id, "items": items}
    if random.random() < 0.33:
        payload["delivery_type"] = "delivery"
        payload["delivery_address"] = fake.street_address()
    if random.random() < 0.2:
        payload["notes"] = fake.sentence(nb_words=6)
    return payload


def payment_data(order_id: str, amount: Decimal, customer: str | None = None) -> dict:
    return {
        "order_id": order_id,
        "amount": str(amount),
        "payment_method": random.choice(["stripe", "paypal", "cash", "bank_transfer"]),
        "transaction_id": f"lt-txn-{uuid.uuid4().hex[:12]}",
        "customer_id": customer,
    }
