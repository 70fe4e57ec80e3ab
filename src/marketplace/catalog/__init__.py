"""Catalog adapter registry.

Provides get_catalog() / set_catalog() so the product source can be swapped
without touching checkout code. Defaults to the in-memory catalog.
"""

from marketplace.catalog.port import CatalogPort, CatalogProduct

__all__ = ["CatalogPort", "CatalogProduct", "get_catalog", "reset_catalog", "set_catalog"]

_current_catalog: CatalogPort | None = None


def get_catalog() -> CatalogPort:
    """Return the current catalog. Defaults to InMemoryCatalog."""
    global _current_catalog
    if _current_catalog is None:
        from marketplace.catalog.memory_adapter import InMemoryCatalog

        _current_catalog = InMemoryCatalog()
    return _current_catalog


def set_catalog(catalog: CatalogPort) -> None:
    """Override the active catalog (useful for tests)."""
    global _current_catalog
    _current_catalog = catalog


def reset_catalog() -> None:
    """Reset to the default catalog."""
    global _current_catalog
    _current_catalog = None
