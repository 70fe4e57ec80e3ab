"""Payment status updates: command and handler.

Gateways and producers (for cash and bank transfers) report the outcome of a
payment here. A completed payment settles its order.
"""

from protean import handle
from protean.fields import Identifier, String

from marketplace.domain import marketplace
from marketplace.payments.payment import Payment
from marketplace.payments.reconciler import PaymentReconciler


@marketplace.command(part_of="Payment")
class UpdatePaymentStatus:
    payment_id = Identifier(required=True)
    new_status = String(required=True, max_length=20)
    transaction_id = String(max_length=255)


@marketplace.command_handler(part_of=Payment)
class PaymentSettlementHandler:
    @handle(UpdatePaymentStatus)
    def update_payment_status(self, command):
        payment = PaymentReconciler().update_status(
            payment_id=command.payment_id,
            new_status=command.new_status,
            transaction_id=command.transaction_id,
        )
        return payment.status
