"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state; nothing is shared across
users. State tracks ids returned by creation endpoints so follow-up
operations can reference them.
"""

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass
class OrderState:
    """Tracks a single simulated order from checkout to settlement."""

    customer_id: str | None = None
    producer_id: str | None = None
    order_id: str | None = None
    total_amount: Decimal = Decimal("0.00")
    current_status: str = "pending"
    payment_id: str | None = None
    status_path: list[str] = field(default_factory=lambda: ["preparing", "ready", "completed"])
