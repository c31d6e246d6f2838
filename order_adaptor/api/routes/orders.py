from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status

from order_adaptor.api.dependencies import get_bearer_token, get_order_service
from order_adaptor.domain.models.order import (
    CheckoutVerification,
    Order,
    OrderAnalytics,
    OrderInvoice,
    OrderPaginator,
    OrderStatus,
    OrderStatusSnapshot,
    OrderTracking,
    PaymentResult,
    PaymentStatus,
)
from order_adaptor.domain.schemas.requests import (
    CheckoutRequest,
    CreateOrderRequest,
    GetOrdersQuery,
    OrderListOptions,
    PaymentRequest,
    UpdateOrderRequest,
    UpdateOrderStatusRequest,
    UpdatePaymentStatusRequest,
)
from order_adaptor.services.order_service import OrderService

orders_router = APIRouter()


def _list_options(
    page: int = Query(1, ge=1),
    limit: int = Query(15, ge=1, le=100),
    order_status: Optional[OrderStatus] = Query(None),
    payment_status: Optional[PaymentStatus] = Query(None),
    search: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None),
    sort_order: Optional[str] = Query(None, pattern="^(asc|desc)$")
) -> OrderListOptions:
    return OrderListOptions(
        page=page,
        limit=limit,
        order_status=order_status,
        payment_status=payment_status,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order
    )


@orders_router.post(
    "",
    response_model=Order,
    status_code=status.HTTP_201_CREATED,
    summary="Create order"
)
async def create_order(
    request: CreateOrderRequest,
    token: Optional[str] = Depends(get_bearer_token),
    order_service: OrderService = Depends(get_order_service)
):
    """Creates an order; payment redirect data is included when the gateway returns it."""
    return await order_service.create(request, token=token)


@orders_router.get("", response_model=OrderPaginator, summary="Get orders")
async def get_orders(
    limit: Optional[int] = Query(None, ge=1, le=100),
    page: Optional[int] = Query(None, ge=1),
    customer_id: Optional[str] = Query(None),
    tracking_number: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    shop_id: Optional[str] = Query(None),
    token: Optional[str] = Depends(get_bearer_token),
    order_service: OrderService = Depends(get_order_service)
):
    """Gets orders filtered by criteria."""
    query = GetOrdersQuery(
        limit=limit,
        page=page,
        customer_id=customer_id,
        tracking_number=tracking_number,
        search=search,
        shop_id=shop_id
    )
    return await order_service.get_orders(query, token=token)


@orders_router.get("/analytics", response_model=OrderAnalytics)
async def get_order_analytics(
    shop_id: Optional[int] = Query(None, ge=1),
    token: Optional[str] = Depends(get_bearer_token),
    order_service: OrderService = Depends(get_order_service)
):
    return await order_service.get_order_analytics(shop_id, token=token)


@orders_router.get("/tracking/{tracking_number}", response_model=OrderTracking)
async def get_order_tracking(
    tracking_number: str = Path(...),
    token: Optional[str] = Depends(get_bearer_token),
    order_service: OrderService = Depends(get_order_service)
):
    return await order_service.get_order_tracking(tracking_number, token=token)


@orders_router.post("/checkout/verify", response_model=CheckoutVerification)
async def verify_checkout(
    request: CheckoutRequest,
    token: Optional[str] = Depends(get_bearer_token),
    order_service: OrderService = Depends(get_order_service)
):
    """Verifies the cart before checkout."""
    return await order_service.verify_checkout(request, token=token)


@orders_router.get("/customer/{customer_id}", response_model=OrderPaginator)
async def get_orders_by_customer(
    customer_id: int = Path(..., ge=1),
    options: OrderListOptions = Depends(_list_options),
    token: Optional[str] = Depends(get_bearer_token),
    order_service: OrderService = Depends(get_order_service)
):
    return await order_service.get_orders_by_customer(customer_id, options, token=token)


@orders_router.get("/shop/{shop_id}", response_model=OrderPaginator)
async def get_orders_by_shop(
    shop_id: int = Path(..., ge=1),
    options: OrderListOptions = Depends(_list_options),
    token: Optional[str] = Depends(get_bearer_token),
    order_service: OrderService = Depends(get_order_service)
):
    return await order_service.get_orders_by_shop(shop_id, options, token=token)


@orders_router.get("/{identifier}", response_model=Order)
async def get_order(
    identifier: str = Path(..., description="Order ID or tracking number"),
    token: Optional[str] = Depends(get_bearer_token),
    order_service: OrderService = Depends(get_order_service)
):
    """Gets an order by ID or tracking number."""
    return await order_service.get_order_by_id_or_tracking_number(identifier, token=token)


@orders_router.put("/{order_id}", response_model=Order)
async def update_order(
    request: UpdateOrderRequest,
    order_id: int = Path(..., ge=1),
    token: Optional[str] = Depends(get_bearer_token),
    order_service: OrderService = Depends(get_order_service)
):
    return await order_service.update(order_id, request, token=token)


@orders_router.post("/{order_id}/cancel", response_model=Order)
async def cancel_order(
    order_id: int = Path(..., ge=1),
    token: Optional[str] = Depends(get_bearer_token),
    order_service: OrderService = Depends(get_order_service)
):
    return await order_service.cancel(order_id, token=token)


@orders_router.get("/{order_id}/status", response_model=OrderStatusSnapshot)
async def get_order_status(
    order_id: int = Path(..., ge=1),
    token: Optional[str] = Depends(get_bearer_token),
    order_service: OrderService = Depends(get_order_service)
):
    return await order_service.get_order_status(order_id, token=token)


@orders_router.put("/{order_id}/status", response_model=Order)
async def update_order_status(
    request: UpdateOrderStatusRequest,
    order_id: int = Path(..., ge=1),
    token: Optional[str] = Depends(get_bearer_token),
    order_service: OrderService = Depends(get_order_service)
):
    return await order_service.update_order_status(order_id, request.order_status, token=token)


@orders_router.put("/{order_id}/payment-status", response_model=Order)
async def update_payment_status(
    request: UpdatePaymentStatusRequest,
    order_id: int = Path(..., ge=1),
    token: Optional[str] = Depends(get_bearer_token),
    order_service: OrderService = Depends(get_order_service)
):
    return await order_service.update_payment_status(order_id, request.payment_status, token=token)


@orders_router.post("/{order_id}/payment", response_model=PaymentResult)
async def process_payment(
    request: PaymentRequest,
    order_id: int = Path(..., ge=1),
    token: Optional[str] = Depends(get_bearer_token),
    order_service: OrderService = Depends(get_order_service)
):
    return await order_service.process_payment(order_id, request, token=token)


@orders_router.get("/{order_id}/invoice", response_model=OrderInvoice)
async def get_order_invoice(
    order_id: int = Path(..., ge=1),
    token: Optional[str] = Depends(get_bearer_token),
    order_service: OrderService = Depends(get_order_service)
):
    return await order_service.get_order_invoice(order_id, token=token)
