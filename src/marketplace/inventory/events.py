"""Domain events for the StockItem aggregate.

Every movement of a product's stock counter is recorded as an event and the
counter is rebuilt from them. Reservations and releases carry the order that
caused them so stock can be reconciled against orders.
"""

from protean.fields import DateTime, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="StockItem")
class StockInitialized:
    """A producer started tracking stock for a product."""

    __version__ = 1

    product_id = Identifier(required=True)
    producer_id = Identifier(required=True)
    quantity = Integer(required=True)
    initialized_at = DateTime(required=True)


@marketplace.event(part_of="StockItem")
class StockRestocked:
    """A producer added units to a product's stock."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    restocked_at = DateTime(required=True)


@marketplace.event(part_of="StockItem")
class StockReserved:
    """Units were taken out of stock for an order."""

    __version__ = 1

    product_id = Identifier(required=True)
    order_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    reserved_at = DateTime(required=True)


@marketplace.event(part_of="StockItem")
class StockReleased:
    """Units taken for an order were put back into stock."""

    __version__ = 1

    product_id = Identifier(required=True)
    order_id = Identifier(required=True)
    quantity = Integer(required=True)
    reason = String(required=True, max_length=50)  # order_cancelled, order_declined, order_refunded
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    released_at = DateTime(required=True)
