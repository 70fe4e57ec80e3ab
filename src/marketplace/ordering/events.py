"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Identifier, String, Text

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    """A customer checked out a cart and the stock for it was taken."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    producer_id = Identifier(required=True)
    items = Text(required=True)  # JSON list of line snapshots
    total_amount = String(required=True, max_length=20)
    delivery_type = String(required=True, max_length=20)
    delivery_address = String(max_length=500)
    customer_notes = Text()
    placed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderStatusChanged:
    """A producer moved the order along the fulfillment path."""

    __version__ = 1

    order_id = Identifier(required=True)
    from_status = String(required=True, max_length=20)
    to_status = String(required=True, max_length=20)
    actor = String(required=True, max_length=20)
    note = String(max_length=500)
    changed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled and its stock is to be put back."""

    __version__ = 1

    order_id = Identifier(required=True)
    from_status = String(required=True, max_length=20)
    cancelled_by = String(required=True, max_length=20)
    reason = String(max_length=500)
    cancelled_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderSettled:
    """A completed payment was applied to the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_id = Identifier(required=True)
    from_status = String(required=True, max_length=20)
    to_status = String(required=True, max_length=20)
    settled_at = DateTime(required=True)
