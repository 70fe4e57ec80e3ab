"""Pydantic request/response schemas for the marketplace API.

These are external contracts, kept separate from the protean commands they
are translated into. Money goes out as two-place decimal strings.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------
class CartLineSchema(BaseModel):
    product_id: str
    quantity: int


class PlaceOrderRequest(BaseModel):
    customer_id: str
    producer_id: str
    items: list[CartLineSchema]
    delivery_type: str = "pickup"
    delivery_address: str | None = None
    notes: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "cust-001",
                    "producer_id": "farm-001",
                    "items": [{"product_id": "eggs-dozen", "quantity": 2}],
                    "delivery_type": "delivery",
                    "delivery_address": "12 Orchard Lane",
                    "notes": "Leave at the gate",
                }
            ]
        }
    }


class UpdateOrderStatusRequest(BaseModel):
    status: str
    notes: str | None = None
    producer_id: str | None = None


class CancelOrderRequest(BaseModel):
    customer_id: str
    reason: str | None = None


class CreatePaymentRequest(BaseModel):
    order_id: str
    amount: Decimal
    payment_method: str
    transaction_id: str | None = None
    customer_id: str | None = None


class UpdatePaymentStatusRequest(BaseModel):
    status: str
    transaction_id: str | None = None


class RefundPaymentRequest(BaseModel):
    refund_amount: Decimal
    reason: str | None = None


class InitializeStockRequest(BaseModel):
    product_id: str
    producer_id: str
    quantity: int = Field(ge=0, default=0)


class RestockRequest(BaseModel):
    quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------
class OrderItemSchema(BaseModel):
    product_id: str
    product_name: str | None = None
    unit: str | None = None
    quantity: int
    unit_price: str
    line_total: str


class StatusChangeSchema(BaseModel):
    from_status: str | None = None
    to_status: str
    actor: str
    note: str | None = None
    changed_at: datetime


class OrderSchema(BaseModel):
    id: str
    customer_id: str
    producer_id: str
    status: str
    items: list[OrderItemSchema]
    total_amount: str
    delivery_type: str
    delivery_address: str | None = None
    customer_notes: str | None = None
    settled_payment_id: str | None = None
    status_history: list[StatusChangeSchema]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order) -> "OrderSchema":
        return cls(
            id=str(order.id),
            customer_id=str(order.customer_id),
            producer_id=str(order.producer_id),
            status=order.status,
            items=[
                OrderItemSchema(
                    product_id=str(item.product_id),
                    product_name=item.product_name,
                    unit=item.unit,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    line_total=item.line_total,
                )
                for item in order.items
            ],
            total_amount=order.total_amount,
            delivery_type=order.delivery_type,
            delivery_address=order.delivery_address,
            customer_notes=order.customer_notes,
            settled_payment_id=str(order.settled_payment_id) if order.settled_payment_id else None,
            status_history=[
                StatusChangeSchema(
                    from_status=change.from_status,
                    to_status=change.to_status,
                    actor=change.actor,
                    note=change.note,
                    changed_at=change.changed_at,
                )
                for change in order.status_history
            ],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderResponse(BaseModel):
    order: OrderSchema


class OrderSummarySchema(BaseModel):
    order_id: str
    customer_id: str
    producer_id: str
    status: str
    item_count: int
    total_amount: str | None = None
    delivery_type: str | None = None
    created_at: datetime | None = None


class OrderListResponse(BaseModel):
    orders: list[OrderSummarySchema]


class PaymentSchema(BaseModel):
    id: str
    order_id: str
    customer_id: str
    amount: str
    payment_method: str
    transaction_id: str | None = None
    status: str
    refunded_amount: str | None = None
    refund_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_payment(cls, payment) -> "PaymentSchema":
        return cls(
            id=str(payment.id),
            order_id=str(payment.order_id),
            customer_id=str(payment.customer_id),
            amount=payment.amount,
            payment_method=payment.payment_method,
            transaction_id=payment.transaction_id,
            status=payment.status,
            refunded_amount=payment.refunded_amount,
            refund_reason=payment.refund_reason,
            created_at=payment.created_at,
            updated_at=payment.updated_at,
        )


class PaymentResponse(BaseModel):
    payment: PaymentSchema


class PaymentRecordSchema(BaseModel):
    payment_id: str
    order_id: str
    amount: str
    payment_method: str | None = None
    status: str
    refunded_amount: str | None = None
    created_at: datetime | None = None


class PaymentListResponse(BaseModel):
    payments: list[PaymentRecordSchema]


class StockLevelResponse(BaseModel):
    product_id: str
    stock_quantity: int
