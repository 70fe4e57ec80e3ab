"""Stock management: commands producers use to put products on the ledger."""

from protean import handle
from protean.fields import Identifier, Integer

from marketplace.domain import marketplace
from marketplace.inventory.ledger import InventoryLedger
from marketplace.inventory.stock import StockItem
from marketplace.locking import atomically, product_key


@marketplace.command(part_of="StockItem")
class InitializeStock:
    """Start tracking stock for a product."""

    product_id = Identifier(required=True)
    producer_id = Identifier(required=True)
    quantity = Integer(default=0, min_value=0)


@marketplace.command(part_of="StockItem")
class RestockProduct:
    """Add units to a product's stock."""

    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@marketplace.command_handler(part_of=StockItem)
class StockManagementHandler:
    @handle(InitializeStock)
    def initialize_stock(self, command):
        with atomically(product_key(command.product_id)):
            item = InventoryLedger().initialize(
                product_id=command.product_id,
                producer_id=command.producer_id,
                quantity=command.quantity or 0,
            )
        return str(item.id)

    @handle(RestockProduct)
    def restock_product(self, command):
        with atomically(product_key(command.product_id)):
            item = InventoryLedger().restock(command.product_id, command.quantity)
        return item.stock_quantity
