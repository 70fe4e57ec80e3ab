"""StockItem aggregate (event sourced).

One StockItem per product, identified by the product id, holding the single
counter checkout decrements. The counter never goes below zero: a reservation
larger than what is on hand is refused before any event is raised.
"""

from datetime import UTC, datetime

from protean import apply
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer

from marketplace.domain import marketplace
from marketplace.errors import OutOfStock
from marketplace.inventory.events import (
    StockInitialized,
    StockReleased,
    StockReserved,
    StockRestocked,
)


@marketplace.aggregate(is_event_sourced=True)
class StockItem:
    product_id = Identifier(required=True)
    producer_id = Identifier(required=True)
    stock_quantity = Integer(default=0, min_value=0)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def initialize(cls, product_id, producer_id, quantity=0):
        """Start tracking stock for a product.

        The aggregate takes the product id as its own identity so the ledger
        can load it directly by product.
        """
        if quantity < 0:
            raise ValidationError({"quantity": ["Initial stock cannot be negative"]})

        item = cls(
            id=str(product_id),
            product_id=str(product_id),
            producer_id=str(producer_id),
            stock_quantity=0,
        )
        item.raise_(
            StockInitialized(
                product_id=str(product_id),
                producer_id=str(producer_id),
                quantity=quantity,
                initialized_at=datetime.now(UTC),
            )
        )
        return item

    def restock(self, quantity):
        if quantity <= 0:
            raise ValidationError({"quantity": ["Restock quantity must be positive"]})

        self.raise_(
            StockRestocked(
                product_id=str(self.product_id),
                quantity=quantity,
                previous_quantity=self.stock_quantity,
                new_quantity=self.stock_quantity + quantity,
                restocked_at=datetime.now(UTC),
            )
        )

    def reserve(self, order_id, quantity):
        """Take ``quantity`` units for ``order_id``.

        Raises OutOfStock without touching the counter when fewer units are
        on hand than requested.
        """
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        if self.stock_quantity < quantity:
            raise OutOfStock(self.product_id, requested=quantity, available=self.stock_quantity)

        self.raise_(
            StockReserved(
                product_id=str(self.product_id),
                order_id=str(order_id),
                quantity=quantity,
                previous_quantity=self.stock_quantity,
                new_quantity=self.stock_quantity - quantity,
                reserved_at=datetime.now(UTC),
            )
        )

    def release(self, order_id, quantity, reason):
        """Return ``quantity`` units taken for ``order_id``. Has no upper bound."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        self.raise_(
            StockReleased(
                product_id=str(self.product_id),
                order_id=str(order_id),
                quantity=quantity,
                reason=reason,
                previous_quantity=self.stock_quantity,
                new_quantity=self.stock_quantity + quantity,
                released_at=datetime.now(UTC),
            )
        )

    # -------------------------------------------------------------------
    # @apply methods: rebuild state during event replay
    # -------------------------------------------------------------------
    @apply
    def _on_stock_initialized(self, event: StockInitialized):
        self.id = event.product_id
        self.product_id = event.product_id
        self.producer_id = event.producer_id
        self.stock_quantity = event.quantity
        self.created_at = event.initialized_at
        self.updated_at = event.initialized_at

    @apply
    def _on_stock_restocked(self, event: StockRestocked):
        self.stock_quantity = event.new_quantity
        self.updated_at = event.restocked_at

    @apply
    def _on_stock_reserved(self, event: StockReserved):
        self.stock_quantity = event.new_quantity
        self.updated_at = event.reserved_at

    @apply
    def _on_stock_released(self, event: StockReleased):
        self.stock_quantity = event.new_quantity
        self.updated_at = event.released_at
