"""Payment aggregate (event sourced).

State machine:
    pending → completed → refunded
    pending → failed → pending (retry)

``refunded`` is only reachable through ``refund``, never through a plain
status update. Updating a payment to the status it already has is a no-op.
"""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from protean import apply
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import (
    InvalidTransition,
    PaymentNotCompleted,
    PaymentNotFound,
    RefundExceedsPayment,
)
from marketplace.money import format_money, is_full_amount, positive_money, to_money
from marketplace.payments.events import (
    PaymentCompleted,
    PaymentCreated,
    PaymentFailed,
    PaymentRefunded,
    PaymentReopened,
)


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    STRIPE = "stripe"
    PAYPAL = "paypal"
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"


_VALID_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.COMPLETED, PaymentStatus.FAILED},
    PaymentStatus.FAILED: {PaymentStatus.PENDING},  # retry
    PaymentStatus.COMPLETED: {PaymentStatus.REFUNDED},
    PaymentStatus.REFUNDED: set(),  # Terminal
}


@marketplace.aggregate(is_event_sourced=True)
class Payment:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    amount = String(required=True, max_length=20)
    payment_method = String(choices=PaymentMethod, required=True)
    transaction_id = String(max_length=255)
    status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    refunded_amount = String(max_length=20)
    refund_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()
    completed_at = DateTime()
    refunded_at = DateTime()

    @classmethod
    def create(cls, order_id, customer_id, amount, payment_method, transaction_id=None):
        try:
            method = PaymentMethod(payment_method)
        except ValueError:
            raise ValidationError(
                {"payment_method": [f"Payment method must be one of {', '.join(m.value for m in PaymentMethod)}"]}
            ) from None

        payment = cls._create_new()
        payment.raise_(
            PaymentCreated(
                payment_id=str(payment.id),
                order_id=str(order_id),
                customer_id=str(customer_id),
                amount=format_money(positive_money(amount)),
                payment_method=method.value,
                transaction_id=transaction_id,
                created_at=datetime.now(UTC),
            )
        )
        return payment

    @property
    def amount_value(self) -> Decimal:
        return to_money(self.amount)

    @property
    def current_status(self) -> PaymentStatus:
        return PaymentStatus(self.status)

    def change_status(self, new_status, transaction_id=None) -> bool:
        """Move the payment to ``new_status``.

        Returns False when the payment already has that status.
        """
        current = self.current_status
        try:
            target = PaymentStatus(new_status)
        except ValueError:
            raise InvalidTransition(current.value, new_status, subject="payment") from None

        if target == current:
            return False

        if target == PaymentStatus.REFUNDED or target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition(current.value, target.value, subject="payment")

        now = datetime.now(UTC)
        if target == PaymentStatus.COMPLETED:
            self.raise_(
                PaymentCompleted(
                    payment_id=str(self.id),
                    order_id=str(self.order_id),
                    amount=self.amount,
                    transaction_id=transaction_id or self.transaction_id,
                    completed_at=now,
                )
            )
        elif target == PaymentStatus.FAILED:
            self.raise_(
                PaymentFailed(
                    payment_id=str(self.id),
                    order_id=str(self.order_id),
                    transaction_id=transaction_id or self.transaction_id,
                    failed_at=now,
                )
            )
        else:
            self.raise_(
                PaymentReopened(
                    payment_id=str(self.id),
                    order_id=str(self.order_id),
                    transaction_id=transaction_id or self.transaction_id,
                    reopened_at=now,
                )
            )
        return True

    def refund(self, refund_amount, reason=None) -> bool:
        """Refund a completed payment. Returns True for a full refund."""
        if self.current_status != PaymentStatus.COMPLETED:
            raise PaymentNotCompleted(self.status)

        refund_amount = positive_money(refund_amount, field="refund_amount")
        if refund_amount > self.amount_value:
            raise RefundExceedsPayment(format_money(refund_amount), self.amount)

        full_refund = is_full_amount(refund_amount, self.amount_value)
        self.raise_(
            PaymentRefunded(
                payment_id=str(self.id),
                order_id=str(self.order_id),
                refund_amount=format_money(refund_amount),
                reason=reason,
                full_refund=full_refund,
                refunded_at=datetime.now(UTC),
            )
        )
        return full_refund

    # -------------------------------------------------------------------
    # @apply methods: rebuild state during event replay
    # -------------------------------------------------------------------
    @apply
    def _on_payment_created(self, event: PaymentCreated):
        self.id = event.payment_id
        self.order_id = event.order_id
        self.customer_id = event.customer_id
        self.amount = event.amount
        self.payment_method = event.payment_method
        self.transaction_id = event.transaction_id
        self.status = PaymentStatus.PENDING.value
        self.created_at = event.created_at
        self.updated_at = event.created_at

    @apply
    def _on_payment_completed(self, event: PaymentCompleted):
        self.status = PaymentStatus.COMPLETED.value
        self.transaction_id = event.transaction_id
        self.completed_at = event.completed_at
        self.updated_at = event.completed_at

    @apply
    def _on_payment_failed(self, event: PaymentFailed):
        self.status = PaymentStatus.FAILED.value
        self.transaction_id = event.transaction_id
        self.updated_at = event.failed_at

    @apply
    def _on_payment_reopened(self, event: PaymentReopened):
        self.status = PaymentStatus.PENDING.value
        self.transaction_id = event.transaction_id
        self.updated_at = event.reopened_at

    @apply
    def _on_payment_refunded(self, event: PaymentRefunded):
        self.status = PaymentStatus.REFUNDED.value
        self.refunded_amount = event.refund_amount
        self.refund_reason = event.reason
        self.refunded_at = event.refunded_at
        self.updated_at = event.refunded_at


def find_payment(payment_id) -> Payment:
    """Load a payment or raise PaymentNotFound."""
    try:
        return current_domain.repository_for(Payment).get(str(payment_id))
    except ObjectNotFoundError:
        raise PaymentNotFound(payment_id) from None
