"""Inventory ledger: the stock counter operations checkout and cancellation use.

``reserve`` and ``release`` work inside the caller's unit of work and assume
the caller holds the product locks (see ``hold``), which keeps concurrent
read-modify-write cycles on one counter strictly sequential.
"""

from contextlib import contextmanager

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from marketplace.errors import OutOfStock
from marketplace.inventory.stock import StockItem
from marketplace.locking import locks, product_keys

logger = structlog.get_logger(__name__)


class InventoryLedger:
    @contextmanager
    def hold(self, product_ids):
        """Lock the counters of ``product_ids`` for the duration of the block."""
        with locks.hold(*product_keys(product_ids)):
            yield

    def find(self, product_id) -> StockItem | None:
        try:
            return current_domain.repository_for(StockItem).get(str(product_id))
        except ObjectNotFoundError:
            return None

    def stock_level(self, product_id) -> int:
        item = self.find(product_id)
        return item.stock_quantity if item else 0

    def reserve(self, product_id, quantity, order_id) -> StockItem:
        """Decrement the counter, or raise OutOfStock leaving it untouched.

        A product nobody ever stocked counts as zero units on hand.
        """
        item = self.find(product_id)
        if item is None:
            raise OutOfStock(product_id, requested=quantity, available=0)

        item.reserve(order_id=order_id, quantity=quantity)
        current_domain.repository_for(StockItem).add(item)
        logger.debug(
            "stock_reserved",
            product_id=str(product_id),
            order_id=str(order_id),
            quantity=quantity,
            remaining=item.stock_quantity,
        )
        return item

    def release(self, product_id, quantity, order_id, reason) -> StockItem | None:
        item = self.find(product_id)
        if item is None:
            logger.warning(
                "stock_release_skipped",
                product_id=str(product_id),
                order_id=str(order_id),
                quantity=quantity,
                reason="no stock record",
            )
            return None

        item.release(order_id=order_id, quantity=quantity, reason=reason)
        current_domain.repository_for(StockItem).add(item)
        logger.debug(
            "stock_released",
            product_id=str(product_id),
            order_id=str(order_id),
            quantity=quantity,
            remaining=item.stock_quantity,
        )
        return item

    def release_order(self, order, reason):
        """Put back every unit taken for ``order``."""
        for line in order.items:
            self.release(line.product_id, line.quantity, order.id, reason)

    def initialize(self, product_id, producer_id, quantity=0) -> StockItem:
        if self.find(product_id) is not None:
            raise ValidationError({"product_id": [f"Stock for product {product_id} is already tracked"]})

        item = StockItem.initialize(product_id=product_id, producer_id=producer_id, quantity=quantity)
        current_domain.repository_for(StockItem).add(item)
        logger.info("stock_initialized", product_id=str(product_id), quantity=quantity)
        return item

    def restock(self, product_id, quantity) -> StockItem:
        item = self.find(product_id)
        if item is None:
            raise ObjectNotFoundError({"product_id": [f"No stock record for product {product_id}"]})

        item.restock(quantity)
        current_domain.repository_for(StockItem).add(item)
        logger.info("stock_restocked", product_id=str(product_id), quantity=quantity, new_quantity=item.stock_quantity)
        return item
