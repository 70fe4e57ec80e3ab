"""Order aggregate (event sourced).

An order is placed against a single producer, snapshots the price of every
line at checkout, and carries an append-only history of the status changes it
went through. Orders are never deleted; cancellation is a status.
"""

import json
from datetime import UTC, datetime
from decimal import Decimal
from uuid import uuid4

from protean import apply
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import (
    EmptyCart,
    InvalidDeliveryType,
    MissingDeliveryAddress,
    OrderNotFound,
    PaymentAlreadySettled,
)
from marketplace.money import ZERO, format_money, to_money
from marketplace.ordering.events import (
    OrderCancelled,
    OrderPlaced,
    OrderSettled,
    OrderStatusChanged,
)
from marketplace.ordering.status import (
    Actor,
    DeliveryType,
    OrderStatus,
    assert_cancellable,
    assert_transition,
)


@marketplace.entity(part_of="Order")
class OrderItem:
    """A line of the order with the product details as they were at checkout."""

    product_id = Identifier(required=True)
    product_name = String(max_length=255)
    unit = String(max_length=50)
    quantity = Integer(required=True, min_value=1)
    unit_price = String(required=True, max_length=20)
    line_total = String(required=True, max_length=20)


@marketplace.entity(part_of="Order")
class StatusChange:
    """One entry of the order's status history."""

    from_status = String(max_length=20)
    to_status = String(required=True, max_length=20)
    actor = String(required=True, max_length=20)
    note = String(max_length=500)
    changed_at = DateTime(required=True)


@marketplace.aggregate(is_event_sourced=True)
class Order:
    customer_id = Identifier(required=True)
    producer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    total_amount = String(max_length=20, default="0.00")
    delivery_type = String(choices=DeliveryType, default=DeliveryType.PICKUP.value)
    delivery_address = String(max_length=500)
    customer_notes = Text()
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    status_history = HasMany(StatusChange)
    settled_payment_id = Identifier()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer_id,
        producer_id,
        lines,
        delivery_type=DeliveryType.PICKUP.value,
        delivery_address=None,
        customer_notes=None,
    ):
        """Create a pending order from priced cart lines.

        Args:
            lines: dicts with product_id, product_name, unit, quantity and
                unit_price (Decimal or decimal string).
        """
        if not lines:
            raise EmptyCart()

        try:
            delivery_type = DeliveryType(delivery_type).value
        except ValueError:
            raise InvalidDeliveryType(delivery_type) from None
        if delivery_type == DeliveryType.DELIVERY.value and not (delivery_address or "").strip():
            raise MissingDeliveryAddress()

        snapshots = []
        total = ZERO
        for line in lines:
            unit_price = to_money(line["unit_price"], field="unit_price")
            line_total = to_money(unit_price * line["quantity"])
            total += line_total
            snapshots.append(
                {
                    # Pre-generated so replay rebuilds identical items
                    "id": str(uuid4()),
                    "product_id": str(line["product_id"]),
                    "product_name": line.get("product_name"),
                    "unit": line.get("unit"),
                    "quantity": line["quantity"],
                    "unit_price": format_money(unit_price),
                    "line_total": format_money(line_total),
                }
            )

        order = cls._create_new()
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                producer_id=str(producer_id),
                items=json.dumps(snapshots),
                total_amount=format_money(total),
                delivery_type=delivery_type,
                delivery_address=(delivery_address or "").strip() or None,
                customer_notes=customer_notes,
                placed_at=datetime.now(UTC),
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def total(self) -> Decimal:
        return to_money(self.total_amount)

    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    def is_owned_by(self, customer_id) -> bool:
        return str(self.customer_id) == str(customer_id)

    def item_quantities(self) -> dict[str, int]:
        quantities: dict[str, int] = {}
        for item in self.items:
            quantities[str(item.product_id)] = quantities.get(str(item.product_id), 0) + item.quantity
        return quantities

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    def advance(self, new_status, note=None):
        """Producer status update. Cancelling here declines a pending order."""
        target = assert_transition(self.status, new_status, actor=Actor.PRODUCER)
        if target == OrderStatus.CANCELLED:
            self.cancel(actor=Actor.PRODUCER, reason=note)
            return

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                from_status=self.status,
                to_status=target.value,
                actor=Actor.PRODUCER.value,
                note=note,
                changed_at=datetime.now(UTC),
            )
        )

    def cancel(self, actor=Actor.CUSTOMER, reason=None):
        actor = Actor(actor)
        if actor == Actor.CUSTOMER:
            assert_cancellable(self.status, actor=actor)
        else:
            assert_transition(self.status, OrderStatus.CANCELLED, actor=actor)

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                from_status=self.status,
                cancelled_by=actor.value,
                reason=reason,
                cancelled_at=datetime.now(UTC),
            )
        )

    def settle(self, payment_id) -> bool:
        """Apply a completed payment to the order.

        A pending order becomes confirmed; orders further along only record
        the payment. Returns False when there was nothing to do: the payment
        already settled this order, or the order is cancelled.
        """
        if self.settled_payment_id:
            if str(self.settled_payment_id) == str(payment_id):
                return False
            raise PaymentAlreadySettled(self.id, self.settled_payment_id)

        if self.current_status == OrderStatus.CANCELLED:
            return False

        to_status = OrderStatus.CONFIRMED if self.current_status == OrderStatus.PENDING else self.current_status
        self.raise_(
            OrderSettled(
                order_id=str(self.id),
                payment_id=str(payment_id),
                from_status=self.status,
                to_status=to_status.value,
                settled_at=datetime.now(UTC),
            )
        )
        return True

    # -------------------------------------------------------------------
    # @apply methods: rebuild state during event replay
    # -------------------------------------------------------------------
    def _record_change(self, from_status, to_status, actor, note, changed_at):
        self.add_status_history(
            StatusChange(
                from_status=from_status,
                to_status=to_status,
                actor=actor,
                note=note,
                changed_at=changed_at,
            )
        )
        self.updated_at = changed_at

    @apply
    def _on_order_placed(self, event: OrderPlaced):
        self.id = event.order_id
        self.customer_id = event.customer_id
        self.producer_id = event.producer_id
        self.total_amount = event.total_amount
        self.delivery_type = event.delivery_type
        self.delivery_address = event.delivery_address
        self.customer_notes = event.customer_notes
        self.status = OrderStatus.PENDING.value
        self.created_at = event.placed_at

        items_data = json.loads(event.items) if isinstance(event.items, str) else []
        self.items = [OrderItem(**item_data) for item_data in items_data]

        self._record_change(None, OrderStatus.PENDING.value, Actor.CUSTOMER.value, "Order placed", event.placed_at)

    @apply
    def _on_order_status_changed(self, event: OrderStatusChanged):
        self.status = event.to_status
        self._record_change(event.from_status, event.to_status, event.actor, event.note, event.changed_at)

    @apply
    def _on_order_cancelled(self, event: OrderCancelled):
        self.status = OrderStatus.CANCELLED.value
        self._record_change(
            event.from_status,
            OrderStatus.CANCELLED.value,
            event.cancelled_by,
            event.reason,
            event.cancelled_at,
        )

    @apply
    def _on_order_settled(self, event: OrderSettled):
        self.settled_payment_id = event.payment_id
        if event.to_status != event.from_status:
            self.status = event.to_status
            self._record_change(
                event.from_status,
                event.to_status,
                Actor.PAYMENT.value,
                f"Payment {event.payment_id} completed",
                event.settled_at,
            )
        else:
            self.updated_at = event.settled_at


def find_order(order_id) -> Order:
    """Load an order or raise OrderNotFound."""
    try:
        return current_domain.repository_for(Order).get(str(order_id))
    except ObjectNotFoundError:
        raise OrderNotFound(order_id) from None
