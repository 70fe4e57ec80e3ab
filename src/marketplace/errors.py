"""Error taxonomy for the marketplace.

Business rule violations are protean ``ValidationError`` subclasses, split
into plain input problems (``MarketplaceValidationError``) and conflicts with
the current state of stock, orders, or payments (``MarketplaceConflict``).
Missing records are ``ObjectNotFoundError`` subclasses. Every error exposes a
stable ``code`` and the usual ``messages`` dict.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class MarketplaceValidationError(ValidationError):
    code = "ValidationError"
    field = "_entity"

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        super().__init__({field or self.field: [message]})


class MarketplaceConflict(ValidationError):
    code = "Conflict"
    field = "_entity"

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        super().__init__({field or self.field: [message]})


class MarketplaceNotFound(ObjectNotFoundError):
    code = "NotFound"

    def __init__(self, message: str, field: str = "_entity"):
        self.message = message
        self.messages = {field: [message]}
        super().__init__(self.messages)


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------
class EmptyCart(MarketplaceValidationError):
    code = "EmptyCart"
    field = "items"

    def __init__(self):
        super().__init__("Order must contain at least one item")


class InvalidDeliveryType(MarketplaceValidationError):
    code = "InvalidDeliveryType"
    field = "delivery_type"

    def __init__(self, delivery_type):
        self.delivery_type = delivery_type
        super().__init__(f"Unknown delivery type: {delivery_type}")


class ProductUnavailable(MarketplaceValidationError):
    code = "ProductUnavailable"
    field = "items"

    def __init__(self, product_id):
        self.product_id = str(product_id)
        super().__init__(f"Product {product_id} not found or not available from this producer")


class InvalidQuantity(MarketplaceValidationError):
    code = "InvalidQuantity"
    field = "quantity"

    def __init__(self, product_id, quantity):
        self.product_id = str(product_id)
        self.quantity = quantity
        super().__init__(f"Quantity for product {product_id} must be at least 1, got {quantity}")


class MissingDeliveryAddress(MarketplaceValidationError):
    code = "MissingDeliveryAddress"
    field = "delivery_address"

    def __init__(self):
        super().__init__("Delivery address is required for delivery orders")


class InvalidAmount(MarketplaceValidationError):
    code = "InvalidAmount"
    field = "amount"

    def __init__(self, message="Amount must be a positive decimal value", field=None):
        super().__init__(message, field=field)


# ---------------------------------------------------------------------------
# Conflicts with current state
# ---------------------------------------------------------------------------
class OutOfStock(MarketplaceConflict):
    code = "OutOfStock"
    field = "items"

    def __init__(self, product_id, requested, available):
        self.product_id = str(product_id)
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product {product_id}: {available} available, {requested} requested"
        )


class AmountMismatch(MarketplaceConflict):
    code = "AmountMismatch"
    field = "amount"

    def __init__(self, amount, expected):
        self.amount = amount
        self.expected = expected
        super().__init__(f"Payment amount {amount} does not match order total {expected}")


class InvalidTransition(MarketplaceConflict):
    code = "InvalidTransition"
    field = "status"

    def __init__(self, current, target, subject="order"):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move {subject} from {current} to {target}")


class NotCancellable(MarketplaceConflict):
    code = "NotCancellable"
    field = "status"

    def __init__(self, status):
        self.status = status
        super().__init__(f"Order cannot be cancelled in {status} status")


class OrderCancelled(MarketplaceConflict):
    code = "OrderCancelled"
    field = "order_id"

    def __init__(self, order_id):
        self.order_id = str(order_id)
        super().__init__(f"Order {order_id} is cancelled")


class PaymentNotCompleted(MarketplaceConflict):
    code = "PaymentNotCompleted"
    field = "status"

    def __init__(self, status):
        self.status = status
        super().__init__(f"Only completed payments can be refunded, payment is {status}")


class RefundExceedsPayment(MarketplaceConflict):
    code = "RefundExceedsPayment"
    field = "refund_amount"

    def __init__(self, refund_amount, amount):
        self.refund_amount = refund_amount
        self.amount = amount
        super().__init__(f"Refund amount {refund_amount} exceeds payment amount {amount}")


class PaymentAlreadySettled(MarketplaceConflict):
    code = "PaymentAlreadySettled"
    field = "order_id"

    def __init__(self, order_id, payment_id):
        self.order_id = str(order_id)
        self.payment_id = str(payment_id)
        super().__init__(f"Order {order_id} is already settled by payment {payment_id}")


# ---------------------------------------------------------------------------
# Missing records
# ---------------------------------------------------------------------------
class OrderNotFound(MarketplaceNotFound):
    code = "OrderNotFound"

    def __init__(self, order_id):
        self.order_id = str(order_id)
        super().__init__(f"Order {order_id} not found", field="order_id")


class PaymentNotFound(MarketplaceNotFound):
    code = "PaymentNotFound"

    def __init__(self, payment_id):
        self.payment_id = str(payment_id)
        super().__init__(f"Payment {payment_id} not found", field="payment_id")


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------
class CheckoutFailed(Exception):
    """Checkout could not be committed for a reason unrelated to business rules."""

    code = "CheckoutFailed"

    def __init__(self, message="Order could not be processed, please try again"):
        super().__init__(message)
        self.message = message
        self.messages = {"_entity": [message]}
