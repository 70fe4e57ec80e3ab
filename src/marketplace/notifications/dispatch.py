"""Best-effort transactional emails.

Called only after the unit of work that changed the order or payment has
committed. A failed or crashing email channel is logged and never undoes or
fails the business operation.
"""

import structlog

from marketplace.notifications import get_email_channel

logger = structlog.get_logger(__name__)


def _deliver(to, subject: str, body: str, **context) -> bool:
    try:
        result = get_email_channel().send(to=str(to), subject=subject, body=body)
    except Exception:
        logger.exception("email_dispatch_failed", to=str(to), subject=subject, **context)
        return False

    if result.get("status") != "sent":
        logger.warning("email_not_sent", to=str(to), subject=subject, error=result.get("error"), **context)
        return False

    logger.info("email_sent", to=str(to), subject=subject, message_id=result.get("message_id"), **context)
    return True


def order_placed(order) -> None:
    lines = "\n".join(
        f"- {item.quantity} x {item.product_name or item.product_id} @ {item.unit_price} = {item.line_total}"
        for item in order.items
    )
    body = f"Order {order.id}\n{lines}\nTotal: {order.total_amount}\nDelivery: {order.delivery_type}"
    _deliver(order.customer_id, "Your order has been placed", body, order_id=str(order.id))
    _deliver(order.producer_id, "You have a new order", body, order_id=str(order.id))


def order_status_changed(order) -> None:
    _deliver(
        order.customer_id,
        f"Your order is now {order.status}",
        f"Order {order.id} moved to {order.status}.",
        order_id=str(order.id),
    )


def order_cancelled(order, cancelled_by: str) -> None:
    body = f"Order {order.id} was cancelled by the {cancelled_by}."
    recipient = order.producer_id if cancelled_by == "customer" else order.customer_id
    _deliver(recipient, "Order cancelled", body, order_id=str(order.id))


def payment_completed(payment) -> None:
    _deliver(
        payment.customer_id,
        "Payment received",
        f"We received {payment.amount} for order {payment.order_id}.",
        payment_id=str(payment.id),
    )


def payment_refunded(payment, order_cancelled: bool) -> None:
    body = f"{payment.refunded_amount} was refunded for order {payment.order_id}."
    if order_cancelled:
        body += " The order has been cancelled."
    _deliver(payment.customer_id, "Refund issued", body, payment_id=str(payment.id))
