"""Checkout: turn a cart into a pending order and take its stock.

Validation happens before anything is locked, in a fixed order so callers get
the same error for the same bad cart:

    1. cart not empty, delivery type known
    2. every product exists, belongs to the producer, and is available
    3. every quantity is at least one
    4. delivery orders have an address

The order and the stock decrements for all its lines are then committed as
one unit of work under the locks of every product in the cart. If any line is
short, nothing is committed.
"""

import json
from dataclasses import dataclass

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.catalog import get_catalog
from marketplace.domain import marketplace
from marketplace.errors import (
    CheckoutFailed,
    EmptyCart,
    InvalidDeliveryType,
    InvalidQuantity,
    MissingDeliveryAddress,
    ProductUnavailable,
)
from marketplace.inventory.ledger import InventoryLedger
from marketplace.locking import atomically, product_keys
from marketplace.notifications import dispatch
from marketplace.ordering.order import Order
from marketplace.ordering.status import DeliveryType

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CartLine:
    product_id: str
    quantity: object

    @classmethod
    def coerce(cls, raw) -> "CartLine":
        if isinstance(raw, CartLine):
            return raw
        if isinstance(raw, dict):
            return cls(product_id=str(raw.get("product_id") or ""), quantity=raw.get("quantity"))
        return cls(product_id=str(getattr(raw, "product_id", "") or ""), quantity=getattr(raw, "quantity", None))


def _is_valid_quantity(quantity) -> bool:
    return isinstance(quantity, int) and not isinstance(quantity, bool) and quantity >= 1


class CheckoutOrchestrator:
    def __init__(self, catalog=None, ledger=None):
        self.catalog = catalog or get_catalog()
        self.ledger = ledger or InventoryLedger()

    def validate(self, producer_id, items, delivery_type, delivery_address) -> list[dict]:
        """Check the cart and return its lines priced from the catalog."""
        lines = [CartLine.coerce(raw) for raw in items or []]
        if not lines:
            raise EmptyCart()

        if delivery_type not in {member.value for member in DeliveryType}:
            raise InvalidDeliveryType(delivery_type)

        products = {}
        for line in lines:
            product = self.catalog.get_product(line.product_id) if line.product_id else None
            if product is None or str(product.producer_id) != str(producer_id) or not product.is_available:
                raise ProductUnavailable(line.product_id)
            products[line.product_id] = product

        for line in lines:
            if not _is_valid_quantity(line.quantity):
                raise InvalidQuantity(line.product_id, line.quantity)

        if delivery_type == DeliveryType.DELIVERY.value and not (delivery_address or "").strip():
            raise MissingDeliveryAddress()

        return [
            {
                "product_id": line.product_id,
                "product_name": products[line.product_id].name,
                "unit": products[line.product_id].unit,
                "quantity": line.quantity,
                "unit_price": products[line.product_id].price,
            }
            for line in lines
        ]

    def checkout(
        self,
        customer_id,
        producer_id,
        items,
        delivery_type=DeliveryType.PICKUP.value,
        delivery_address=None,
        notes=None,
    ) -> Order:
        lines = self.validate(producer_id, items, delivery_type, delivery_address)

        # A product listed on several lines is reserved once for the combined
        # quantity, in order of first appearance.
        wanted: dict[str, int] = {}
        for line in lines:
            wanted[line["product_id"]] = wanted.get(line["product_id"], 0) + line["quantity"]

        try:
            with atomically(*product_keys(wanted)):
                order = Order.place(
                    customer_id=customer_id,
                    producer_id=producer_id,
                    lines=lines,
                    delivery_type=delivery_type,
                    delivery_address=delivery_address,
                    customer_notes=notes,
                )
                for product_id, quantity in wanted.items():
                    self.ledger.reserve(product_id, quantity, order.id)
                current_domain.repository_for(Order).add(order)
        except (ValidationError, ObjectNotFoundError) as exc:
            logger.info(
                "checkout_rejected",
                customer_id=str(customer_id),
                producer_id=str(producer_id),
                error=getattr(exc, "code", type(exc).__name__),
            )
            raise
        except Exception as exc:
            logger.exception("checkout_failed", customer_id=str(customer_id), producer_id=str(producer_id))
            raise CheckoutFailed() from exc

        logger.info(
            "order_placed",
            order_id=str(order.id),
            customer_id=str(customer_id),
            producer_id=str(producer_id),
            total_amount=order.total_amount,
            lines=len(lines),
        )
        dispatch.order_placed(order)
        return order


@marketplace.command(part_of="Order")
class PlaceOrder:
    """Check out a cart against one producer."""

    customer_id = Identifier(required=True)
    producer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {"product_id", "quantity"}
    delivery_type = String(max_length=20, default=DeliveryType.PICKUP.value)
    delivery_address = String(max_length=500)
    notes = Text()


@marketplace.command_handler(part_of=Order)
class CheckoutHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items = json.loads(command.items) if isinstance(command.items, str) else command.items
        order = CheckoutOrchestrator().checkout(
            customer_id=command.customer_id,
            producer_id=command.producer_id,
            items=items,
            delivery_type=command.delivery_type or DeliveryType.PICKUP.value,
            delivery_address=command.delivery_address,
            notes=command.notes,
        )
        return str(order.id)
