"""In-memory catalog used in development and tests."""

import json
from decimal import Decimal
from pathlib import Path

from marketplace.catalog.port import CatalogPort, CatalogProduct
from marketplace.money import positive_money


class InMemoryCatalog(CatalogPort):
    """Catalog backed by a dict, populated through ``add_product``."""

    def __init__(self):
        self.products: dict[str, CatalogProduct] = {}

    @classmethod
    def from_file(cls, path: str | Path) -> "InMemoryCatalog":
        """Load a JSON list of products, each shaped like ``add_product``'s arguments."""
        catalog = cls()
        for record in json.loads(Path(path).read_text()):
            catalog.add_product(**record)
        return catalog

    def add_product(
        self,
        product_id: str,
        producer_id: str,
        name: str,
        price: Decimal | str,
        unit: str = "each",
        is_available: bool = True,
    ) -> CatalogProduct:
        product = CatalogProduct(
            id=str(product_id),
            producer_id=str(producer_id),
            name=name,
            price=positive_money(price, field="price"),
            unit=unit,
            is_available=is_available,
        )
        self.products[product.id] = product
        return product

    def get_product(self, product_id: str) -> CatalogProduct | None:
        return self.products.get(str(product_id))

    def reset(self):
        self.products.clear()
