"""Payment reconciliation: keep payments and orders consistent.

- a payment is accepted only for a live order and only for the order total
- completing a payment confirms a pending order, once
- a full refund cancels the order and returns its stock

Each operation locks the payment, its order and, for refunds, the order's
products, and commits everything it changes in one unit of work.
"""

import structlog
from protean.utils.globals import current_domain

from marketplace.errors import AmountMismatch, OrderCancelled, OrderNotFound
from marketplace.inventory.ledger import InventoryLedger
from marketplace.locking import atomically, order_key, payment_key, product_keys
from marketplace.money import format_money, positive_money, within_tolerance
from marketplace.notifications import dispatch
from marketplace.ordering.order import Order, find_order
from marketplace.ordering.status import Actor, OrderStatus
from marketplace.payments.payment import Payment, PaymentStatus, find_payment

logger = structlog.get_logger(__name__)


class PaymentReconciler:
    def __init__(self, ledger=None):
        self.ledger = ledger or InventoryLedger()

    def create_payment(self, order_id, amount, payment_method, transaction_id=None, customer_id=None) -> Payment:
        """Record a pending payment for an order.

        ``customer_id``, when given, must own the order; otherwise the order
        is reported as not found.
        """
        amount = positive_money(amount)

        with atomically(order_key(order_id)):
            order = find_order(order_id)
            if customer_id is not None and not order.is_owned_by(customer_id):
                raise OrderNotFound(order_id)

            if order.current_status == OrderStatus.CANCELLED:
                raise OrderCancelled(order.id)

            if not within_tolerance(amount, order.total):
                raise AmountMismatch(format_money(amount), order.total_amount)

            payment = Payment.create(
                order_id=order.id,
                customer_id=order.customer_id,
                amount=amount,
                payment_method=payment_method,
                transaction_id=transaction_id,
            )
            current_domain.repository_for(Payment).add(payment)

        logger.info(
            "payment_created",
            payment_id=str(payment.id),
            order_id=str(order.id),
            amount=payment.amount,
            payment_method=payment.payment_method,
        )
        return payment

    def update_status(self, payment_id, new_status, transaction_id=None) -> Payment:
        """Move a payment to ``new_status`` and settle its order on completion."""
        order_id = find_payment(payment_id).order_id

        with atomically(payment_key(payment_id), order_key(order_id)):
            payment = find_payment(payment_id)
            changed = payment.change_status(new_status, transaction_id=transaction_id)
            if not changed:
                logger.debug("payment_status_unchanged", payment_id=str(payment.id), status=payment.status)
                return payment

            if payment.current_status == PaymentStatus.COMPLETED:
                self._settle(payment)
            current_domain.repository_for(Payment).add(payment)

        logger.info("payment_status_updated", payment_id=str(payment.id), status=payment.status)
        if payment.current_status == PaymentStatus.COMPLETED:
            dispatch.payment_completed(payment)
        return payment

    def _settle(self, payment):
        order = find_order(payment.order_id)
        if order.current_status == OrderStatus.CANCELLED:
            # The money arrived for an order that no longer exists for the
            # customer; it stays recorded so it can be refunded.
            logger.warning(
                "payment_completed_for_cancelled_order",
                payment_id=str(payment.id),
                order_id=str(order.id),
                amount=payment.amount,
                action="refund required",
            )
            return

        if order.settle(payment.id):
            current_domain.repository_for(Order).add(order)
            logger.info("order_settled", order_id=str(order.id), payment_id=str(payment.id), status=order.status)

    def refund(self, payment_id, refund_amount, reason=None) -> Payment:
        """Refund a completed payment.

        A full refund cancels the order (unless it is already cancelled) and
        puts its stock back. A partial refund touches only the payment.
        """
        order = find_order(find_payment(payment_id).order_id)
        keys = [payment_key(payment_id), order_key(order.id), *product_keys(order.item_quantities())]
        order_cancelled = False

        with atomically(*keys):
            payment = find_payment(payment_id)
            full_refund = payment.refund(refund_amount, reason=reason)

            if full_refund:
                order = find_order(payment.order_id)
                if order.current_status != OrderStatus.CANCELLED:
                    order.cancel(actor=Actor.PAYMENT, reason=reason or f"Full refund of payment {payment.id}")
                    self.ledger.release_order(order, reason="order_refunded")
                    current_domain.repository_for(Order).add(order)
                    order_cancelled = True

            current_domain.repository_for(Payment).add(payment)

        logger.info(
            "payment_refunded",
            payment_id=str(payment.id),
            order_id=str(payment.order_id),
            refund_amount=payment.refunded_amount,
            full_refund=full_refund,
            order_cancelled=order_cancelled,
        )
        dispatch.payment_refunded(payment, order_cancelled)
        return payment
