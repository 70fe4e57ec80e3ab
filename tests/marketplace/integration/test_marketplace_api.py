"""Integration tests for the marketplace API endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from marketplace.api import (
    inventory_router,
    order_router,
    payment_router,
    register_marketplace_exception_handlers,
)


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(order_router)
    app.include_router(payment_router)
    app.include_router(inventory_router)
    register_marketplace_exception_handlers(app)
    return TestClient(app)


@pytest.fixture()
def stocked(client):
    for product_id, quantity in (("eggs", 10), ("honey", 2)):
        response = client.post(
            "/inventory", json={"product_id": product_id, "producer_id": "farm-001", "quantity": quantity}
        )
        assert response.status_code == 201


def _place(client, items=None, **overrides):
    body = {
        "customer_id": "cust-api-001",
        "producer_id": "farm-001",
        "items": items or [{"product_id": "eggs", "quantity": 2}],
    }
    body.update(overrides)
    return client.post("/orders", json=body)


def _order_id(client, **kwargs):
    response = _place(client, **kwargs)
    assert response.status_code == 201
    return response.json()["order"]["id"]


class TestInventoryEndpoints:
    def test_initialize_and_read(self, client, stocked):
        response = client.get("/inventory/eggs")
        assert response.status_code == 200
        assert response.json() == {"product_id": "eggs", "stock_quantity": 10}

    def test_restock(self, client, stocked):
        response = client.post("/inventory/honey/restock", json={"quantity": 3})
        assert response.status_code == 200
        assert response.json()["stock_quantity"] == 5

    def test_restock_unknown_product(self, client):
        response = client.post("/inventory/ghost/restock", json={"quantity": 3})
        assert response.status_code == 404

    def test_restock_requires_positive_quantity(self, client, stocked):
        response = client.post("/inventory/honey/restock", json={"quantity": 0})
        assert response.status_code == 422

    def test_untracked_product_reads_zero(self, client):
        assert client.get("/inventory/carrots").json()["stock_quantity"] == 0


class TestOrderEndpoints:
    def test_place_order(self, client, stocked):
        response = _place(client, delivery_type="delivery", delivery_address="12 Orchard Lane")
        assert response.status_code == 201

        order = response.json()["order"]
        assert order["status"] == "pending"
        assert order["total_amount"] == "9.00"
        assert order["items"][0]["product_name"] == "Free-range eggs"
        assert order["status_history"][0]["to_status"] == "pending"
        assert client.get("/inventory/eggs").json()["stock_quantity"] == 8

    def test_empty_cart_is_bad_request(self, client, stocked):
        response = client.post(
            "/orders", json={"customer_id": "cust-api-001", "producer_id": "farm-001", "items": []}
        )
        assert response.status_code == 400
        assert response.json()["code"] == "EmptyCart"

    def test_unavailable_product_is_bad_request(self, client, stocked):
        response = _place(client, items=[{"product_id": "kale", "quantity": 1}])
        assert response.status_code == 400
        assert response.json()["code"] == "ProductUnavailable"

    def test_missing_delivery_address_is_bad_request(self, client, stocked):
        response = _place(client, delivery_type="delivery")
        assert response.status_code == 400
        assert response.json()["code"] == "MissingDeliveryAddress"

    def test_out_of_stock_is_conflict(self, client, stocked):
        response = _place(client, items=[{"product_id": "honey", "quantity": 3}])
        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "OutOfStock"
        assert "2 available" in body["error"]["items"][0]
        assert client.get("/inventory/honey").json()["stock_quantity"] == 2

    def test_malformed_body_is_unprocessable(self, client):
        response = client.post("/orders", json={"customer_id": "cust-api-001"})
        assert response.status_code == 422

    def test_get_order(self, client, stocked):
        order_id = _order_id(client)
        response = client.get(f"/orders/{order_id}")
        assert response.status_code == 200
        assert response.json()["order"]["id"] == order_id

    def test_get_missing_order(self, client):
        response = client.get("/orders/no-such-order")
        assert response.status_code == 404
        assert response.json()["code"] == "OrderNotFound"

    def test_list_orders_for_customer(self, client, stocked):
        order_id = _order_id(client)
        _order_id(client, customer_id="cust-api-002")

        response = client.get("/orders", params={"customer_id": "cust-api-001"})
        assert response.status_code == 200
        orders = response.json()["orders"]
        assert [order["order_id"] for order in orders] == [order_id]

    def test_producer_advances_order(self, client, stocked):
        order_id = _order_id(client)
        response = client.patch(f"/orders/{order_id}/status", json={"status": "preparing", "notes": "Packing"})
        assert response.status_code == 200
        assert response.json()["order"]["status"] == "preparing"

    def test_backwards_transition_is_conflict(self, client, stocked):
        order_id = _order_id(client)
        client.patch(f"/orders/{order_id}/status", json={"status": "ready"})
        response = client.patch(f"/orders/{order_id}/status", json={"status": "confirmed"})
        assert response.status_code == 409
        assert response.json()["code"] == "InvalidTransition"

    def test_customer_cancels_pending_order(self, client, stocked):
        order_id = _order_id(client)
        response = client.patch(f"/orders/{order_id}/cancel", json={"customer_id": "cust-api-001"})
        assert response.status_code == 200
        assert response.json()["order"]["status"] == "cancelled"
        assert client.get("/inventory/eggs").json()["stock_quantity"] == 10

    def test_cancel_confirmed_order_is_conflict(self, client, stocked):
        order_id = _order_id(client)
        client.patch(f"/orders/{order_id}/status", json={"status": "confirmed"})
        response = client.patch(f"/orders/{order_id}/cancel", json={"customer_id": "cust-api-001"})
        assert response.status_code == 409
        assert response.json()["code"] == "NotCancellable"

    def test_cancel_someone_elses_order_is_not_found(self, client, stocked):
        order_id = _order_id(client)
        response = client.patch(f"/orders/{order_id}/cancel", json={"customer_id": "cust-api-999"})
        assert response.status_code == 404


class TestPaymentEndpoints:
    def _payment_id(self, client, order_id, amount="9.00"):
        response = client.post(
            "/payments", json={"order_id": order_id, "amount": amount, "payment_method": "stripe"}
        )
        assert response.status_code == 201
        return response.json()["payment"]["id"]

    def test_create_payment(self, client, stocked):
        order_id = _order_id(client)
        response = client.post(
            "/payments",
            json={"order_id": order_id, "amount": "9.00", "payment_method": "stripe", "transaction_id": "pi_1"},
        )
        assert response.status_code == 201
        payment = response.json()["payment"]
        assert payment["status"] == "pending"
        assert payment["amount"] == "9.00"
        assert payment["customer_id"] == "cust-api-001"

    def test_amount_mismatch_is_conflict(self, client, stocked):
        order_id = _order_id(client)
        response = client.post("/payments", json={"order_id": order_id, "amount": "8.00", "payment_method": "stripe"})
        assert response.status_code == 409
        assert response.json()["code"] == "AmountMismatch"

    def test_negative_amount_is_bad_request(self, client, stocked):
        order_id = _order_id(client)
        response = client.post("/payments", json={"order_id": order_id, "amount": "-9.00", "payment_method": "cash"})
        assert response.status_code == 400
        assert response.json()["code"] == "InvalidAmount"

    def test_payment_for_missing_order(self, client):
        response = client.post("/payments", json={"order_id": "nope", "amount": "9.00", "payment_method": "cash"})
        assert response.status_code == 404

    def test_completion_confirms_order(self, client, stocked):
        order_id = _order_id(client)
        payment_id = self._payment_id(client, order_id)

        response = client.patch(f"/payments/{payment_id}/status", json={"status": "completed"})
        assert response.status_code == 200
        assert response.json()["payment"]["status"] == "completed"
        assert client.get(f"/orders/{order_id}").json()["order"]["status"] == "confirmed"

    def test_full_refund_cancels_order(self, client, stocked):
        order_id = _order_id(client)
        payment_id = self._payment_id(client, order_id)
        client.patch(f"/payments/{payment_id}/status", json={"status": "completed"})

        response = client.post(f"/payments/{payment_id}/refund", json={"refund_amount": "9.00", "reason": "Broken"})
        assert response.status_code == 200
        assert response.json()["payment"]["status"] == "refunded"
        assert client.get(f"/orders/{order_id}").json()["order"]["status"] == "cancelled"
        assert client.get("/inventory/eggs").json()["stock_quantity"] == 10

    def test_refund_of_pending_payment_is_conflict(self, client, stocked):
        order_id = _order_id(client)
        payment_id = self._payment_id(client, order_id)
        response = client.post(f"/payments/{payment_id}/refund", json={"refund_amount": "9.00"})
        assert response.status_code == 409
        assert response.json()["code"] == "PaymentNotCompleted"

    def test_list_payments_for_order(self, client, stocked):
        order_id = _order_id(client)
        payment_id = self._payment_id(client, order_id)
        response = client.get("/payments", params={"order_id": order_id})
        assert response.status_code == 200
        assert [payment["payment_id"] for payment in response.json()["payments"]] == [payment_id]

    def test_get_missing_payment(self, client):
        response = client.get("/payments/no-such-payment")
        assert response.status_code == 404
        assert response.json()["code"] == "PaymentNotFound"
