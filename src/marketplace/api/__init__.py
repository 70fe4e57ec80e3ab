"""Marketplace API package."""

from marketplace.api.errors import register_marketplace_exception_handlers
from marketplace.api.routes import inventory_router, order_router, payment_router

__all__ = [
    "inventory_router",
    "order_router",
    "payment_router",
    "register_marketplace_exception_handlers",
]
