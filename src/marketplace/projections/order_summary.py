"""Order summary: listing view for customers and producers."""

import json

from protean.core.projector import on
from protean.fields import DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.ordering.events import (
    OrderCancelled,
    OrderPlaced,
    OrderSettled,
    OrderStatusChanged,
)
from marketplace.ordering.order import Order
from marketplace.ordering.status import OrderStatus


@marketplace.projection
class OrderSummary:
    order_id = Identifier(identifier=True, required=True)
    customer_id = Identifier(required=True)
    producer_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    item_count = Integer(default=0)
    total_amount = String(max_length=20)
    delivery_type = String(max_length=20)
    settled_payment_id = Identifier()
    created_at = DateTime()
    updated_at = DateTime()


@marketplace.projector(projector_for=OrderSummary, aggregates=[Order])
class OrderSummaryProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        items = json.loads(event.items) if isinstance(event.items, str) else []
        current_domain.repository_for(OrderSummary).add(
            OrderSummary(
                order_id=event.order_id,
                customer_id=event.customer_id,
                producer_id=event.producer_id,
                status=OrderStatus.PENDING.value,
                item_count=len(items),
                total_amount=event.total_amount,
                delivery_type=event.delivery_type,
                created_at=event.placed_at,
                updated_at=event.placed_at,
            )
        )

    @on(OrderStatusChanged)
    def on_order_status_changed(self, event):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(event.order_id)
        summary.status = event.to_status
        summary.updated_at = event.changed_at
        repo.add(summary)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(event.order_id)
        summary.status = OrderStatus.CANCELLED.value
        summary.updated_at = event.cancelled_at
        repo.add(summary)

    @on(OrderSettled)
    def on_order_settled(self, event):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(event.order_id)
        summary.status = event.to_status
        summary.settled_payment_id = event.payment_id
        summary.updated_at = event.settled_at
        repo.add(summary)


def list_order_summaries(customer_id=None, producer_id=None, status=None, limit=50) -> list[OrderSummary]:
    """Newest first, filtered by whichever criteria are given."""
    criteria = {
        key: str(value)
        for key, value in (("customer_id", customer_id), ("producer_id", producer_id), ("status", status))
        if value
    }
    query = current_domain.repository_for(OrderSummary)._dao.query
    if criteria:
        query = query.filter(**criteria)
    return query.order_by("-created_at").limit(limit).all().items
