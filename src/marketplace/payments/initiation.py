"""Payment creation: command and handler."""

from protean import handle
from protean.fields import Identifier, String

from marketplace.domain import marketplace
from marketplace.payments.payment import Payment
from marketplace.payments.reconciler import PaymentReconciler


@marketplace.command(part_of="Payment")
class CreatePayment:
    """Record a pending payment for an order."""

    order_id = Identifier(required=True)
    amount = String(required=True, max_length=20)  # Decimal string
    payment_method = String(required=True, max_length=20)
    transaction_id = String(max_length=255)
    customer_id = Identifier()


@marketplace.command_handler(part_of=Payment)
class PaymentInitiationHandler:
    @handle(CreatePayment)
    def create_payment(self, command):
        payment = PaymentReconciler().create_payment(
            order_id=command.order_id,
            amount=command.amount,
            payment_method=command.payment_method,
            transaction_id=command.transaction_id,
            customer_id=command.customer_id,
        )
        return str(payment.id)
