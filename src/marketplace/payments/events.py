"""Domain events for the Payment aggregate."""

from protean.fields import Boolean, DateTime, Identifier, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Payment")
class PaymentCreated:
    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    amount = String(required=True, max_length=20)
    payment_method = String(required=True, max_length=20)
    transaction_id = String(max_length=255)
    created_at = DateTime(required=True)


@marketplace.event(part_of="Payment")
class PaymentCompleted:
    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    amount = String(required=True, max_length=20)
    transaction_id = String(max_length=255)
    completed_at = DateTime(required=True)


@marketplace.event(part_of="Payment")
class PaymentFailed:
    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    transaction_id = String(max_length=255)
    failed_at = DateTime(required=True)


@marketplace.event(part_of="Payment")
class PaymentReopened:
    """A failed payment was put back to pending for another attempt."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    transaction_id = String(max_length=255)
    reopened_at = DateTime(required=True)


@marketplace.event(part_of="Payment")
class PaymentRefunded:
    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    refund_amount = String(required=True, max_length=20)
    reason = String(max_length=500)
    full_refund = Boolean(required=True)
    refunded_at = DateTime(required=True)
