"""Producer status updates: command and handler.

Producers move orders forward through confirmed, preparing, ready and
completed. Setting ``cancelled`` declines a pending order and returns its
stock.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import OrderNotFound
from marketplace.inventory.ledger import InventoryLedger
from marketplace.locking import atomically, order_key, product_keys
from marketplace.notifications import dispatch
from marketplace.ordering.order import Order, find_order
from marketplace.ordering.status import Actor, OrderStatus

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    new_status = String(required=True, max_length=20)
    notes = String(max_length=500)
    producer_id = Identifier()  # When given, the order must belong to this producer


@marketplace.command_handler(part_of=Order)
class FulfillmentHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        order = find_order(command.order_id)
        if command.producer_id and str(order.producer_id) != str(command.producer_id):
            raise OrderNotFound(command.order_id)

        keys = [order_key(order.id)]
        if command.new_status == OrderStatus.CANCELLED.value:
            keys.extend(product_keys(order.item_quantities()))

        with atomically(*keys):
            order = find_order(command.order_id)
            previous_status = order.status
            order.advance(command.new_status, note=command.notes)
            if order.current_status == OrderStatus.CANCELLED:
                InventoryLedger().release_order(order, reason="order_declined")
            current_domain.repository_for(Order).add(order)

        logger.info(
            "order_status_updated",
            order_id=str(order.id),
            from_status=previous_status,
            to_status=order.status,
        )
        if order.current_status == OrderStatus.CANCELLED:
            dispatch.order_cancelled(order, Actor.PRODUCER.value)
        else:
            dispatch.order_status_changed(order)
