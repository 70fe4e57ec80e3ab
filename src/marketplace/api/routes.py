"""FastAPI routes for the marketplace: orders, payments, and stock."""

import json

from fastapi import APIRouter
from protean.utils.globals import current_domain

from marketplace.api.schemas import (
    CancelOrderRequest,
    CreatePaymentRequest,
    InitializeStockRequest,
    OrderListResponse,
    OrderResponse,
    OrderSchema,
    OrderSummarySchema,
    PaymentListResponse,
    PaymentRecordSchema,
    PaymentResponse,
    PaymentSchema,
    PlaceOrderRequest,
    RefundPaymentRequest,
    RestockRequest,
    StockLevelResponse,
    UpdateOrderStatusRequest,
    UpdatePaymentStatusRequest,
)
from marketplace.inventory.ledger import InventoryLedger
from marketplace.inventory.management import InitializeStock, RestockProduct
from marketplace.ordering.cancellation import CancelOrder
from marketplace.ordering.checkout import PlaceOrder
from marketplace.ordering.fulfillment import UpdateOrderStatus
from marketplace.ordering.order import find_order
from marketplace.payments.initiation import CreatePayment
from marketplace.payments.payment import find_payment
from marketplace.payments.refund import RefundPayment
from marketplace.payments.settlement import UpdatePaymentStatus
from marketplace.projections.order_summary import list_order_summaries
from marketplace.projections.payment_history import list_payment_records

# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def place_order(body: PlaceOrderRequest) -> OrderResponse:
    command = PlaceOrder(
        customer_id=body.customer_id,
        producer_id=body.producer_id,
        items=json.dumps([line.model_dump() for line in body.items]),
        delivery_type=body.delivery_type,
        delivery_address=body.delivery_address,
        notes=body.notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return OrderResponse(order=OrderSchema.from_order(find_order(order_id)))


@order_router.get("", response_model=OrderListResponse)
async def list_orders(
    customer_id: str | None = None,
    producer_id: str | None = None,
    status: str | None = None,
    limit: int = 50,
) -> OrderListResponse:
    summaries = list_order_summaries(customer_id=customer_id, producer_id=producer_id, status=status, limit=limit)
    return OrderListResponse(
        orders=[
            OrderSummarySchema(
                order_id=str(summary.order_id),
                customer_id=str(summary.customer_id),
                producer_id=str(summary.producer_id),
                status=summary.status,
                item_count=summary.item_count or 0,
                total_amount=summary.total_amount,
                delivery_type=summary.delivery_type,
                created_at=summary.created_at,
            )
            for summary in summaries
        ]
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    return OrderResponse(order=OrderSchema.from_order(find_order(order_id)))


@order_router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> OrderResponse:
    command = UpdateOrderStatus(
        order_id=order_id,
        new_status=body.status,
        notes=body.notes,
        producer_id=body.producer_id,
    )
    current_domain.process(command, asynchronous=False)
    return OrderResponse(order=OrderSchema.from_order(find_order(order_id)))


@order_router.patch("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(order_id: str, body: CancelOrderRequest) -> OrderResponse:
    command = CancelOrder(order_id=order_id, customer_id=body.customer_id, reason=body.reason)
    current_domain.process(command, asynchronous=False)
    return OrderResponse(order=OrderSchema.from_order(find_order(order_id)))


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("", status_code=201, response_model=PaymentResponse)
async def create_payment(body: CreatePaymentRequest) -> PaymentResponse:
    command = CreatePayment(
        order_id=body.order_id,
        amount=str(body.amount),
        payment_method=body.payment_method,
        transaction_id=body.transaction_id,
        customer_id=body.customer_id,
    )
    payment_id = current_domain.process(command, asynchronous=False)
    return PaymentResponse(payment=PaymentSchema.from_payment(find_payment(payment_id)))


@payment_router.get("", response_model=PaymentListResponse)
async def list_payments(
    customer_id: str | None = None, order_id: str | None = None, limit: int = 50
) -> PaymentListResponse:
    records = list_payment_records(customer_id=customer_id, order_id=order_id, limit=limit)
    return PaymentListResponse(
        payments=[
            PaymentRecordSchema(
                payment_id=str(record.payment_id),
                order_id=str(record.order_id),
                amount=record.amount,
                payment_method=record.payment_method,
                status=record.status,
                refunded_amount=record.refunded_amount,
                created_at=record.created_at,
            )
            for record in records
        ]
    )


@payment_router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(payment_id: str) -> PaymentResponse:
    return PaymentResponse(payment=PaymentSchema.from_payment(find_payment(payment_id)))


@payment_router.patch("/{payment_id}/status", response_model=PaymentResponse)
async def update_payment_status(payment_id: str, body: UpdatePaymentStatusRequest) -> PaymentResponse:
    command = UpdatePaymentStatus(
        payment_id=payment_id,
        new_status=body.status,
        transaction_id=body.transaction_id,
    )
    current_domain.process(command, asynchronous=False)
    return PaymentResponse(payment=PaymentSchema.from_payment(find_payment(payment_id)))


@payment_router.post("/{payment_id}/refund", response_model=PaymentResponse)
async def refund_payment(payment_id: str, body: RefundPaymentRequest) -> PaymentResponse:
    command = RefundPayment(
        payment_id=payment_id,
        refund_amount=str(body.refund_amount),
        reason=body.reason,
    )
    current_domain.process(command, asynchronous=False)
    return PaymentResponse(payment=PaymentSchema.from_payment(find_payment(payment_id)))


# ---------------------------------------------------------------------------
# Inventory Router
# ---------------------------------------------------------------------------
inventory_router = APIRouter(prefix="/inventory", tags=["inventory"])


@inventory_router.post("", status_code=201, response_model=StockLevelResponse)
async def initialize_stock(body: InitializeStockRequest) -> StockLevelResponse:
    command = InitializeStock(
        product_id=body.product_id,
        producer_id=body.producer_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return StockLevelResponse(product_id=body.product_id, stock_quantity=InventoryLedger().stock_level(body.product_id))


@inventory_router.post("/{product_id}/restock", response_model=StockLevelResponse)
async def restock_product(product_id: str, body: RestockRequest) -> StockLevelResponse:
    command = RestockProduct(product_id=product_id, quantity=body.quantity)
    stock_quantity = current_domain.process(command, asynchronous=False)
    return StockLevelResponse(product_id=product_id, stock_quantity=stock_quantity)


@inventory_router.get("/{product_id}", response_model=StockLevelResponse)
async def get_stock_level(product_id: str) -> StockLevelResponse:
    return StockLevelResponse(product_id=product_id, stock_quantity=InventoryLedger().stock_level(product_id))
