"""Customer cancellation: command and handler.

Only a pending order can be cancelled by its customer. Every unit the order
took from stock is put back in the same unit of work.
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
from marketplace.ordering.status import Actor

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    reason = String(max_length=500)


@marketplace.command_handler(part_of=Order)
class CancellationHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order = find_order(command.order_id)
        # Someone else's order is reported exactly like a missing one
        if not order.is_owned_by(command.customer_id):
            raise OrderNotFound(command.order_id)

        with atomically(order_key(order.id), *product_keys(order.item_quantities())):
            order = find_order(command.order_id)
            order.cancel(actor=Actor.CUSTOMER, reason=command.reason or "Cancelled by customer")
            InventoryLedger().release_order(order, reason="order_cancelled")
            current_domain.repository_for(Order).add(order)

        logger.info("order_cancelled", order_id=str(order.id), cancelled_by=Actor.CUSTOMER.value)
        dispatch.order_cancelled(order, Actor.CUSTOMER.value)
