"""
Order facade over the commerce API.

Each coroutine performs one upstream call (two for the ID-then-tracking-number
lookup), maps payloads between storefront and commerce formats, and raises
``OrderServiceError`` on failure with the upstream status, message and field
errors attached.
"""
from typing import Any, Dict, Optional, Union
from urllib.parse import quote

import httpx
from fastapi import status

from order_adaptor.adapters.commerce_client import CommerceAPIClient
from order_adaptor.adapters.transformer import (
    extract_pagination,
    to_storefront_order,
    to_storefront_orders,
    to_upstream_order,
)
from order_adaptor.core.exceptions import (
    CreatedOrderMappingError,
    IntegrationException,
    OrderNotFoundError,
    OrderServiceError,
    UpstreamAPIError,
)
from order_adaptor.core.logging import get_logger
from order_adaptor.domain.models.order import (
    CheckoutValidation,
    CheckoutVerification,
    GPSTracking,
    Order,
    OrderAnalytics,
    OrderInvoice,
    OrderPaginator,
    OrderStatus,
    OrderStatusSnapshot,
    OrderTracking,
    PaymentDetails,
    PaymentInitiation,
    PaymentResult,
    PaymentStatus,
)
from order_adaptor.domain.schemas.requests import (
    CheckoutRequest,
    CreateOrderRequest,
    GetOrdersQuery,
    OrderListOptions,
    PaymentFirstRequest,
    PaymentRequest,
    UpdateOrderRequest,
    UpdateOrderStatusRequest,
    UpdatePaymentStatusRequest,
    VerifyPaymentRequest,
)

logger = get_logger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 15


def _as_dict(payload: Any) -> Dict[str, Any]:
    return payload if isinstance(payload, dict) else {}


def _inner_payload(payload: Any) -> Dict[str, Any]:
    """
    Return the nested ``data`` object of a checkout payload.

    Checkout endpoints may answer with ``{"data": {...}, "message": ...}``
    inside the success envelope; other payloads are returned as they are.
    """
    payload = _as_dict(payload)
    if isinstance(payload.get("data"), dict):
        return payload["data"]
    return payload


class OrderService:
    """Order lifecycle operations against the commerce API."""

    def __init__(self, client: CommerceAPIClient, analytics_zero_on_failure: bool = True):
        """
        Initialize the order service.

        Args:
            client: Commerce API client shared across requests
            analytics_zero_on_failure: Return zeroed analytics instead of raising
                when the analytics call fails
        """
        self.client = client
        self.analytics_zero_on_failure = analytics_zero_on_failure

    async def create(
        self,
        draft: Union[CreateOrderRequest, Dict[str, Any]],
        token: Optional[str] = None
    ) -> Order:
        """
        Create an order.

        The commerce API answers with either ``{"order": ..., "payment": ...}``
        or a bare order. Payment data, when present, is attached to the
        returned order so the storefront can follow payment redirects. A
        response that cannot be mapped raises ``CreatedOrderMappingError``,
        which carries the upstream order ID.
        """
        draft = CreateOrderRequest.model_validate(draft) if isinstance(draft, dict) else draft
        payload = to_upstream_order(draft)
        logger.debug("Creating order", extra={"data": {"payload": payload}})

        try:
            response = await self.client.post("/ecommerce/orders", json=payload, token=token)
        except Exception as e:
            raise self._operation_error("create", "Failed to create order", e) from e

        # The order exists upstream from here on
        body = response.data
        order_data = (body.get("order") or body) if isinstance(body, dict) else body
        payment_data = body.get("payment") if isinstance(body, dict) else None

        try:
            order = to_storefront_order(order_data)
            if payment_data:
                order.payment = (
                    PaymentDetails.model_validate(payment_data)
                    if isinstance(payment_data, dict) else payment_data
                )
        except Exception as e:
            order_id = order_data.get("id") if isinstance(order_data, dict) else None
            logger.error(
                f"Created order {order_id} but could not map the response: {str(e)}",
                extra={"data": {"order_id": order_id, "status_code": response.status_code}}
            )
            raise CreatedOrderMappingError(
                order_id,
                upstream_status=response.status_code,
                upstream_message=str(e)
            ) from e

        logger.info(f"Created order {order.id}")
        return order

    async def get_orders(
        self,
        query: Union[GetOrdersQuery, Dict[str, Any], None] = None,
        token: Optional[str] = None
    ) -> OrderPaginator:
        """Gets a page of orders matching the storefront filters."""
        if query is None:
            query = GetOrdersQuery()
        elif isinstance(query, dict):
            query = GetOrdersQuery.model_validate(query)

        page = query.page or DEFAULT_PAGE
        limit = query.limit or DEFAULT_LIMIT
        params: Dict[str, Any] = {"page": page, "limit": limit}
        if query.customer_id:
            params["customer_id"] = query.customer_id
        if query.tracking_number:
            params["tracking_number"] = query.tracking_number
        if query.shop_id:
            params["shop_id"] = query.shop_id
        if query.search:
            params["search"] = query.search

        try:
            response = await self.client.get("/ecommerce/orders", params=params, token=token)
            return self._paginate(response.envelope, response.data, page, limit)
        except Exception as e:
            raise self._operation_error("get_orders", "Failed to fetch orders", e) from e

    async def get_order_by_id_or_tracking_number(
        self,
        identifier: str,
        token: Optional[str] = None
    ) -> Order:
        """
        Gets an order by ID, falling back to its tracking number.

        GPS tracking details are attached when the upstream order has
        tracking enabled and a delivery job reference.
        """
        path_id = quote(str(identifier), safe="")

        try:
            try:
                response = await self.client.get(f"/ecommerce/orders/{path_id}", token=token)
            except (IntegrationException, httpx.HTTPError) as e:
                logger.info(f"Order lookup by ID '{identifier}' failed ({e}), trying tracking number")
                response = await self.client.get(
                    f"/ecommerce/orders/tracking/{path_id}", token=token
                )

            order_data = response.data
            order = to_storefront_order(order_data)

            if order_data.get("tracking_enabled") and order_data.get("tookan_job_id"):
                order.gps_tracking = GPSTracking(
                    trackingEnabled=bool(order_data["tracking_enabled"]),
                    trackingUrl=order_data.get("tracking_url"),
                    deliveryService=order_data.get("delivery_service"),
                    orderId=order_data.get("id"),
                    orderNumber=order_data.get("tracking_number"),
                    orderStatus=order_data.get("order_status"),
                )
                logger.debug(f"Attached GPS tracking to order {order_data.get('tracking_number')}")

            return order
        except Exception as e:
            upstream = self._upstream_details(e)
            if upstream["upstream_status"] is not None and upstream["upstream_status"] < 500:
                logger.warning(f"Order '{identifier}' not found: {upstream['upstream_message']}")
                raise OrderNotFoundError(identifier, **upstream) from e
            raise self._operation_error(
                "get_order_by_id_or_tracking_number",
                f'Failed to fetch order "{identifier}"',
                e
            ) from e

    async def update(
        self,
        order_id: int,
        patch: Union[UpdateOrderRequest, Dict[str, Any]],
        token: Optional[str] = None
    ) -> Order:
        patch = UpdateOrderRequest.model_validate(patch) if isinstance(patch, dict) else patch

        try:
            response = await self.client.put(
                f"/orders/{order_id}", json=to_upstream_order(patch), token=token
            )
            return to_storefront_order(response.data)
        except Exception as e:
            raise self._operation_error("update", f"Failed to update order {order_id}", e) from e

    async def cancel(self, order_id: int, token: Optional[str] = None) -> Order:
        try:
            response = await self.client.post(f"/orders/{order_id}/cancel", token=token)
            return to_storefront_order(response.data)
        except Exception as e:
            raise self._operation_error("cancel", f"Failed to cancel order {order_id}", e) from e

    async def get_order_status(self, order_id: int, token: Optional[str] = None) -> OrderStatusSnapshot:
        """Gets the order and payment status; missing values read as pending."""
        try:
            response = await self.client.get(f"/orders/{order_id}/status", token=token)
            data = _as_dict(response.data)
            return OrderStatusSnapshot(
                id=data.get("id"),
                order_status=data.get("order_status") or OrderStatus.PENDING.value,
                payment_status=data.get("payment_status") or PaymentStatus.PENDING.value,
                updated_at=data.get("updated_at"),
            )
        except Exception as e:
            raise self._operation_error(
                "get_order_status", f"Failed to get status for order {order_id}", e
            ) from e

    async def update_order_status(
        self,
        order_id: int,
        order_status: Union[OrderStatus, str],
        token: Optional[str] = None
    ) -> Order:
        body = UpdateOrderStatusRequest(order_status=order_status).model_dump(mode="json")

        try:
            response = await self.client.put(f"/orders/{order_id}/status", json=body, token=token)
            return to_storefront_order(response.data)
        except Exception as e:
            raise self._operation_error(
                "update_order_status", f"Failed to update status for order {order_id}", e
            ) from e

    async def update_payment_status(
        self,
        order_id: int,
        payment_status: Union[PaymentStatus, str],
        token: Optional[str] = None
    ) -> Order:
        body = UpdatePaymentStatusRequest(payment_status=payment_status).model_dump(mode="json")

        try:
            response = await self.client.put(
                f"/orders/{order_id}/payment-status", json=body, token=token
            )
            return to_storefront_order(response.data)
        except Exception as e:
            raise self._operation_error(
                "update_payment_status",
                f"Failed to update payment status for order {order_id}",
                e
            ) from e

    async def get_orders_by_customer(
        self,
        customer_id: int,
        options: Union[OrderListOptions, Dict[str, Any], None] = None,
        token: Optional[str] = None
    ) -> OrderPaginator:
        options = self._list_options(options)

        try:
            return await self._list_orders({"customer_id": customer_id}, options, token)
        except Exception as e:
            raise self._operation_error(
                "get_orders_by_customer", f"Failed to fetch orders for customer {customer_id}", e
            ) from e

    async def get_orders_by_shop(
        self,
        shop_id: int,
        options: Union[OrderListOptions, Dict[str, Any], None] = None,
        token: Optional[str] = None
    ) -> OrderPaginator:
        options = self._list_options(options)

        try:
            return await self._list_orders({"shop_id": shop_id}, options, token)
        except Exception as e:
            raise self._operation_error(
                "get_orders_by_shop", f"Failed to fetch orders for shop {shop_id}", e
            ) from e

    async def process_payment(
        self,
        order_id: int,
        payment: Union[PaymentRequest, Dict[str, Any]],
        token: Optional[str] = None
    ) -> PaymentResult:
        payment = PaymentRequest.model_validate(payment) if isinstance(payment, dict) else payment

        try:
            response = await self.client.post(
                f"/orders/{order_id}/payment",
                json=payment.model_dump(mode="json", exclude_none=True),
                token=token
            )
            data = _as_dict(response.data)
            return PaymentResult(
                success=data.get("success") is not False,
                payment_intent=data.get("payment_intent"),
                transaction_id=data.get("transaction_id"),
                message=data.get("message") or "Payment processed successfully",
            )
        except Exception as e:
            raise self._operation_error(
                "process_payment", f"Failed to process payment for order {order_id}", e
            ) from e

    async def get_order_invoice(self, order_id: int, token: Optional[str] = None) -> OrderInvoice:
        try:
            response = await self.client.get(f"/orders/{order_id}/invoice", token=token)
            data = _as_dict(response.data)
            return OrderInvoice(
                invoice_url=data.get("invoice_url"),
                invoice_number=data.get("invoice_number"),
                generated_at=data.get("generated_at"),
            )
        except Exception as e:
            raise self._operation_error(
                "get_order_invoice", f"Failed to get invoice for order {order_id}", e
            ) from e

    async def get_order_tracking(self, tracking_number: str, token: Optional[str] = None) -> OrderTracking:
        try:
            response = await self.client.get(
                f"/orders/tracking/{quote(tracking_number, safe='')}", token=token
            )
            data = _as_dict(response.data)
            return OrderTracking(
                tracking_number=data.get("tracking_number"),
                status=data.get("status"),
                tracking_events=data.get("tracking_events") or [],
                estimated_delivery=data.get("estimated_delivery"),
                carrier=data.get("carrier"),
            )
        except Exception as e:
            raise self._operation_error(
                "get_order_tracking", f"Failed to get tracking for order {tracking_number}", e
            ) from e

    async def verify_checkout(
        self,
        checkout: Union[CheckoutRequest, Dict[str, Any]],
        token: Optional[str] = None
    ) -> CheckoutVerification:
        """Verifies cart availability and returns tax, shipping and coupon data."""
        checkout = CheckoutRequest.model_validate(checkout) if isinstance(checkout, dict) else checkout

        try:
            response = await self.client.post(
                "/ecommerce/orders/verify-checkout",
                json=checkout.model_dump(mode="json", exclude_none=True),
                token=token
            )
            data = _inner_payload(response.data)
            return CheckoutVerification(
                unavailable_products=data.get("unavailable_products") or [],
                total_tax=data.get("total_tax") or 0,
                shipping_charge=data.get("shipping_charge") or 0,
                shipping_zone=data.get("shipping_zone") or "",
                estimated_delivery=data.get("estimated_delivery") or "",
                available_coupons=data.get("available_coupons") or [],
            )
        except Exception as e:
            raise self._operation_error("verify_checkout", "Failed to verify checkout data", e) from e

    async def get_order_analytics(
        self,
        shop_id: Optional[int] = None,
        token: Optional[str] = None
    ) -> OrderAnalytics:
        """
        Gets aggregate order figures, optionally for one shop.

        When ``analytics_zero_on_failure`` is set, failures are logged and
        zeroed analytics are returned instead of raising.
        """
        params = {"shop_id": shop_id} if shop_id else None

        try:
            response = await self.client.get("/orders/analytics", params=params, token=token)
            data = _as_dict(response.data)
            return OrderAnalytics(
                total_orders=data.get("total_orders") or 0,
                total_revenue=data.get("total_revenue") or 0,
                pending_orders=data.get("pending_orders") or 0,
                completed_orders=data.get("completed_orders") or 0,
                cancelled_orders=data.get("cancelled_orders") or 0,
                average_order_value=data.get("average_order_value") or 0,
            )
        except Exception as e:
            if not self.analytics_zero_on_failure:
                raise self._operation_error(
                    "get_order_analytics", "Failed to get order analytics", e
                ) from e
            logger.error(f"Get order analytics failed, returning empty analytics: {str(e)}")
            return OrderAnalytics()

    async def validate_checkout_for_payment(
        self,
        checkout: Union[CheckoutRequest, Dict[str, Any]],
        token: Optional[str] = None
    ) -> CheckoutValidation:
        """
        Payment-first flow, step 1: validate the checkout and open a session.

        Upstream error messages are forwarded to the caller.
        """
        checkout = CheckoutRequest.model_validate(checkout) if isinstance(checkout, dict) else checkout

        try:
            response = await self.client.post(
                "/ecommerce/checkout/validate",
                json=checkout.model_dump(mode="json", exclude_none=True),
                token=token
            )
            payload = _as_dict(response.data)
            data = _inner_payload(payload)
            validation = CheckoutValidation(
                sessionId=data.get("sessionId"),
                validated=bool(data.get("validated")),
                message=payload.get("message") or _as_dict(response.envelope).get("message"),
            )
            logger.info(f"Checkout validated, session {validation.sessionId}")
            return validation
        except Exception as e:
            raise self._operation_error(
                "validate_checkout_for_payment",
                "Failed to validate checkout for payment",
                e,
                forward_upstream_message=True
            ) from e

    async def initiate_payment_first(
        self,
        payment: Union[PaymentFirstRequest, Dict[str, Any]],
        token: Optional[str] = None
    ) -> PaymentInitiation:
        """
        Payment-first flow, step 2: start the payment without creating an order.

        Upstream error messages are forwarded to the caller.
        """
        payment = PaymentFirstRequest.model_validate(payment) if isinstance(payment, dict) else payment

        try:
            response = await self.client.post(
                "/ecommerce/payments/initiate-payment-first",
                json=payment.model_dump(mode="json", exclude_none=True),
                token=token
            )
            payload = _as_dict(response.data)
            data = _inner_payload(payload)
            initiation = PaymentInitiation(
                transactionId=data.get("transactionId"),
                checkoutId=data.get("checkoutId"),
                paymentUrl=data.get("paymentUrl"),
                status=data.get("status"),
                message=data.get("message") or payload.get("message"),
            )
            logger.info(f"Payment initiated for checkout {initiation.checkoutId}")
            return initiation
        except Exception as e:
            raise self._operation_error(
                "initiate_payment_first",
                "Failed to initiate payment",
                e,
                forward_upstream_message=True
            ) from e

    async def get_checkout_session(self, session_id: str, token: Optional[str] = None) -> Dict[str, Any]:
        """Payment-first flow: read back the validated checkout session."""
        try:
            response = await self.client.get(
                f"/ecommerce/checkout/session/{quote(session_id, safe='')}", token=token
            )
            return _inner_payload(response.data)
        except Exception as e:
            raise self._operation_error(
                "get_checkout_session", "Failed to get checkout session", e
            ) from e

    async def verify_payment_for_order(self, checkout_id: str, token: Optional[str] = None) -> Any:
        """
        Payment-first flow, step 3: verify the payment; the commerce API then
        creates the order. Repeated verification of a checkout is handled
        idempotently upstream.
        """
        body = VerifyPaymentRequest(checkoutId=checkout_id).model_dump()

        try:
            response = await self.client.post(
                "/ecommerce/payments/verify-for-order", json=body, token=token
            )
            logger.info(f"Payment verified for checkout {checkout_id}")
            return response.data
        except Exception as e:
            raise self._operation_error(
                "verify_payment_for_order", "Failed to verify payment for order", e
            ) from e

    @staticmethod
    def _list_options(options: Union[OrderListOptions, Dict[str, Any], None]) -> OrderListOptions:
        if options is None:
            return OrderListOptions()
        if isinstance(options, dict):
            return OrderListOptions.model_validate(options)
        return options

    async def _list_orders(
        self,
        filters: Dict[str, Any],
        options: OrderListOptions,
        token: Optional[str]
    ) -> OrderPaginator:
        params = {**filters, **options.model_dump(mode="json", exclude_none=True)}
        response = await self.client.get("/orders", params=params, token=token)
        return self._paginate(response.envelope, response.data, options.page, options.limit)

    def _paginate(self, envelope: Any, data: Any, page: int, limit: int) -> OrderPaginator:
        orders = to_storefront_orders(data)
        return OrderPaginator(data=orders, **extract_pagination(envelope, len(orders), page, limit))

    def _upstream_details(self, error: Exception) -> Dict[str, Any]:
        if isinstance(error, UpstreamAPIError):
            return {
                "upstream_status": error.status_code,
                "upstream_message": error.detail,
                "errors": error.errors,
            }
        if isinstance(error, httpx.HTTPStatusError):
            return {
                "upstream_status": error.response.status_code,
                "upstream_message": str(error),
                "errors": {},
            }
        return {"upstream_status": None, "upstream_message": str(error), "errors": {}}

    def _operation_error(
        self,
        operation: str,
        detail: str,
        error: Exception,
        forward_upstream_message: bool = False
    ) -> OrderServiceError:
        """
        Build the error raised for a failed operation.

        The status code follows the upstream failure: the upstream status for
        HTTP errors, 504 for timeouts, 503 for network failures, 502 otherwise.
        """
        upstream = self._upstream_details(error)

        if upstream["upstream_status"] is not None:
            status_code = upstream["upstream_status"]
        elif isinstance(error, IntegrationException):
            status_code = error.status_code
        else:
            status_code = status.HTTP_502_BAD_GATEWAY

        if forward_upstream_message and isinstance(error, UpstreamAPIError):
            detail = upstream["upstream_message"] or detail

        logger.error(
            f"{detail}: {upstream['upstream_message']}",
            extra={"data": {"operation": operation, "status_code": status_code}}
        )

        return OrderServiceError(
            operation=operation,
            detail=detail,
            status_code=status_code,
            **upstream
        )
