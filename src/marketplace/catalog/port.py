"""Catalog port (abstract interface).

The marketplace never owns product data. Checkout only needs to know who sells
a product, what it costs right now, and whether it may be ordered, and it
reads that through this contract.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class CatalogProduct:
    """Read-only view of a product as listed by its producer."""

    id: str
    producer_id: str
    name: str
    price: Decimal
    unit: str = "each"
    is_available: bool = True


class CatalogPort(ABC):
    """Abstract product lookup."""

    @abstractmethod
    def get_product(self, product_id: str) -> CatalogProduct | None:
        """Return the product, or None when the catalog does not know it."""
        ...
