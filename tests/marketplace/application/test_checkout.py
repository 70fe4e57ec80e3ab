"""Application tests for checkout through the PlaceOrder command."""

from decimal import Decimal

import pytest
from marketplace.errors import (
    CheckoutFailed,
    EmptyCart,
    InvalidDeliveryType,
    InvalidQuantity,
    MissingDeliveryAddress,
    OutOfStock,
    ProductUnavailable,
)
from marketplace.ordering.order import Order
from marketplace.projections.order_summary import list_order_summaries
from protean import current_domain
from protean.core.event_sourced_repository import BaseEventSourcedRepository


class TestSuccessfulCheckout:
    def test_order_is_pending_and_persisted(self, stock, place_order):
        stock(eggs=10, honey=5)
        order_id = place_order([{"product_id": "eggs", "quantity": 2}, {"product_id": "honey", "quantity": 1}])

        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == "pending"
        assert str(order.customer_id) == "cust-001"
        assert [str(item.product_id) for item in order.items] == ["eggs", "honey"]

    def test_stock_is_decremented(self, stock, place_order, stock_level):
        stock(eggs=10, honey=5)
        place_order([{"product_id": "eggs", "quantity": 2}, {"product_id": "honey", "quantity": 1}])
        assert stock_level("eggs") == 8
        assert stock_level("honey") == 4

    def test_total_is_sum_of_catalog_prices(self, stock, place_order):
        stock(eggs=10, honey=5, carrots=5)
        order_id = place_order(
            [
                {"product_id": "eggs", "quantity": 2},
                {"product_id": "honey", "quantity": 1},
                {"product_id": "carrots", "quantity": 3},
            ]
        )
        order = current_domain.repository_for(Order).get(order_id)
        assert order.total_amount == "27.75"
        assert order.total == sum(Decimal(item.unit_price) * item.quantity for item in order.items)

    def test_price_snapshot_survives_catalog_change(self, stock, place_order, catalog):
        stock(eggs=10)
        order_id = place_order([{"product_id": "eggs", "quantity": 1}])
        catalog.add_product("eggs", "farm-001", "Free-range eggs", Decimal("9.99"), unit="dozen")

        order = current_domain.repository_for(Order).get(order_id)
        assert order.items[0].unit_price == "4.50"
        assert order.items[0].product_name == "Free-range eggs"
        assert order.items[0].unit == "dozen"

    def test_duplicate_lines_reserve_combined_quantity(self, stock, place_order, stock_level):
        stock(eggs=5)
        place_order([{"product_id": "eggs", "quantity": 2}, {"product_id": "eggs", "quantity": 3}])
        assert stock_level("eggs") == 0

    def test_delivery_order_keeps_address_and_notes(self, stock, place_order):
        stock(eggs=10)
        order_id = place_order(
            [{"product_id": "eggs", "quantity": 1}],
            delivery_type="delivery",
            delivery_address="12 Orchard Lane",
            notes="Leave at the gate",
        )
        order = current_domain.repository_for(Order).get(order_id)
        assert order.delivery_address == "12 Orchard Lane"
        assert order.customer_notes == "Leave at the gate"

    def test_customer_and_producer_are_emailed(self, stock, place_order, email):
        stock(eggs=10)
        place_order([{"product_id": "eggs", "quantity": 1}])
        assert len(email.sent_to("cust-001")) == 1
        assert len(email.sent_to("farm-001")) == 1

    def test_email_failure_does_not_fail_checkout(self, stock, place_order, email, stock_level):
        email.configure(should_raise=True)
        stock(eggs=10)
        order_id = place_order([{"product_id": "eggs", "quantity": 1}])
        assert current_domain.repository_for(Order).get(order_id).status == "pending"
        assert stock_level("eggs") == 9


class TestOutOfStock:
    def test_short_line_raises_and_keeps_stock(self, stock, place_order, stock_level):
        stock(eggs=2)
        with pytest.raises(OutOfStock) as exc:
            place_order([{"product_id": "eggs", "quantity": 3}])
        assert exc.value.product_id == "eggs"
        assert stock_level("eggs") == 2

    def test_later_short_line_rolls_back_earlier_reservations(self, stock, place_order, stock_level):
        stock(eggs=10, honey=1)
        with pytest.raises(OutOfStock) as exc:
            place_order([{"product_id": "eggs", "quantity": 4}, {"product_id": "honey", "quantity": 2}])
        assert exc.value.product_id == "honey"
        assert stock_level("eggs") == 10
        assert stock_level("honey") == 1

    def test_product_without_stock_record_is_out_of_stock(self, place_order):
        with pytest.raises(OutOfStock) as exc:
            place_order([{"product_id": "carrots", "quantity": 1}])
        assert exc.value.available == 0

    def test_no_email_on_failure(self, stock, place_order, email):
        stock(eggs=1)
        with pytest.raises(OutOfStock):
            place_order([{"product_id": "eggs", "quantity": 2}])
        assert email.sent_emails == []


class TestValidation:
    def test_empty_cart(self, place_order):
        with pytest.raises(EmptyCart):
            place_order([])

    def test_unknown_delivery_type(self, stock, place_order):
        stock(eggs=10)
        with pytest.raises(InvalidDeliveryType):
            place_order([{"product_id": "eggs", "quantity": 1}], delivery_type="drone")

    def test_unknown_product(self, place_order):
        with pytest.raises(ProductUnavailable) as exc:
            place_order([{"product_id": "truffles", "quantity": 1}])
        assert exc.value.product_id == "truffles"

    def test_unavailable_product(self, stock, place_order):
        stock(kale=10)
        with pytest.raises(ProductUnavailable):
            place_order([{"product_id": "kale", "quantity": 1}])

    def test_product_of_another_producer(self, stock, place_order):
        stock(producer_id="farm-002", apples=10)
        with pytest.raises(ProductUnavailable):
            place_order([{"product_id": "apples", "quantity": 1}], producer_id="farm-001")

    @pytest.mark.parametrize("quantity", [0, -1, "2", 1.5])
    def test_invalid_quantity(self, stock, place_order, quantity):
        stock(eggs=10)
        with pytest.raises(InvalidQuantity):
            place_order([{"product_id": "eggs", "quantity": quantity}])

    def test_missing_delivery_address_creates_nothing(self, stock, place_order, stock_level, email):
        stock(eggs=10)
        with pytest.raises(MissingDeliveryAddress):
            place_order([{"product_id": "eggs", "quantity": 1}], delivery_type="delivery")
        assert stock_level("eggs") == 10
        assert email.sent_emails == []

    def test_product_check_comes_before_quantity_check(self, stock, place_order):
        stock(eggs=10)
        with pytest.raises(ProductUnavailable):
            place_order([{"product_id": "eggs", "quantity": 0}, {"product_id": "truffles", "quantity": 1}])

    def test_quantity_check_comes_before_address_check(self, stock, place_order):
        stock(eggs=10)
        with pytest.raises(InvalidQuantity):
            place_order([{"product_id": "eggs", "quantity": 0}], delivery_type="delivery")


class TestInfrastructureFailure:
    @pytest.fixture()
    def broken_order_store(self, monkeypatch):
        original_add = BaseEventSourcedRepository.add

        def add(repo, aggregate, *args, **kwargs):
            if isinstance(aggregate, Order):
                raise RuntimeError("event store unavailable")
            return original_add(repo, aggregate, *args, **kwargs)

        monkeypatch.setattr(BaseEventSourcedRepository, "add", add)

    def test_reservations_are_rolled_back(self, stock, place_order, stock_level, broken_order_store):
        stock(eggs=10, honey=5)

        with pytest.raises(CheckoutFailed) as exc_info:
            place_order([{"product_id": "eggs", "quantity": 2}, {"product_id": "honey", "quantity": 3}])

        assert exc_info.value.messages == {"_entity": ["Order could not be processed, please try again"]}
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert stock_level("eggs") == 10
        assert stock_level("honey") == 5

    def test_nothing_is_recorded_or_sent(self, stock, place_order, email, broken_order_store):
        stock(eggs=10)

        with pytest.raises(CheckoutFailed):
            place_order([{"product_id": "eggs", "quantity": 1}])

        assert list_order_summaries() == []
        assert email.sent_emails == []
