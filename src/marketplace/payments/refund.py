"""Payment refund: command and handler."""

from protean import handle
from protean.fields import Identifier, String

from marketplace.domain import marketplace
from marketplace.payments.payment import Payment
from marketplace.payments.reconciler import PaymentReconciler


@marketplace.command(part_of="Payment")
class RefundPayment:
    """Refund part or all of a completed payment."""

    payment_id = Identifier(required=True)
    refund_amount = String(required=True, max_length=20)  # Decimal string
    reason = String(max_length=500)


@marketplace.command_handler(part_of=Payment)
class RefundHandler:
    @handle(RefundPayment)
    def refund_payment(self, command):
        payment = PaymentReconciler().refund(
            payment_id=command.payment_id,
            refund_amount=command.refund_amount,
            reason=command.reason,
        )
        return payment.status
