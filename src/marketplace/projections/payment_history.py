"""Payment history: every payment a customer made, with its latest status."""

from protean.core.projector import on
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.payments.events import (
    PaymentCompleted,
    PaymentCreated,
    PaymentFailed,
    PaymentRefunded,
    PaymentReopened,
)
from marketplace.payments.payment import Payment, PaymentStatus


@marketplace.projection
class PaymentRecord:
    payment_id = Identifier(identifier=True, required=True)
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    amount = String(required=True, max_length=20)
    payment_method = String(max_length=20)
    status = String(required=True, max_length=20)
    transaction_id = String(max_length=255)
    refunded_amount = String(max_length=20)
    created_at = DateTime()
    updated_at = DateTime()


@marketplace.projector(projector_for=PaymentRecord, aggregates=[Payment])
class PaymentRecordProjector:
    @on(PaymentCreated)
    def on_payment_created(self, event):
        current_domain.repository_for(PaymentRecord).add(
            PaymentRecord(
                payment_id=event.payment_id,
                order_id=event.order_id,
                customer_id=event.customer_id,
                amount=event.amount,
                payment_method=event.payment_method,
                status=PaymentStatus.PENDING.value,
                transaction_id=event.transaction_id,
                created_at=event.created_at,
                updated_at=event.created_at,
            )
        )

    def _update(self, payment_id, status, changed_at, **changes):
        repo = current_domain.repository_for(PaymentRecord)
        record = repo.get(payment_id)
        record.status = status
        record.updated_at = changed_at
        for field, value in changes.items():
            setattr(record, field, value)
        repo.add(record)

    @on(PaymentCompleted)
    def on_payment_completed(self, event):
        self._update(
            event.payment_id,
            PaymentStatus.COMPLETED.value,
            event.completed_at,
            transaction_id=event.transaction_id,
        )

    @on(PaymentFailed)
    def on_payment_failed(self, event):
        self._update(event.payment_id, PaymentStatus.FAILED.value, event.failed_at)

    @on(PaymentReopened)
    def on_payment_reopened(self, event):
        self._update(event.payment_id, PaymentStatus.PENDING.value, event.reopened_at)

    @on(PaymentRefunded)
    def on_payment_refunded(self, event):
        self._update(
            event.payment_id,
            PaymentStatus.REFUNDED.value,
            event.refunded_at,
            refunded_amount=event.refund_amount,
        )


def list_payment_records(customer_id=None, order_id=None, limit=50) -> list[PaymentRecord]:
    criteria = {key: str(value) for key, value in (("customer_id", customer_id), ("order_id", order_id)) if value}
    query = current_domain.repository_for(PaymentRecord)._dao.query
    if criteria:
        query = query.filter(**criteria)
    return query.order_by("-created_at").limit(limit).all().items
