"""Marketplace bounded context: orders, inventory, and payment settlement.

Inventory, orders, and payments live in one domain so that a checkout, a
cancellation, or a refund can update stock, the order, and the payment inside
a single unit of work.
"""

import structlog
from protean.domain import Domain

marketplace = Domain(name="marketplace")

logger = structlog.get_logger(__name__)
