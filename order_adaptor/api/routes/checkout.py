"""
Payment-first checkout routes.

Used for gateways where the order is created only after the payment is
confirmed: validate the checkout, initiate the payment, then verify it.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Path

from order_adaptor.api.dependencies import get_bearer_token, get_order_service
from order_adaptor.domain.models.order import CheckoutValidation, PaymentInitiation
from order_adaptor.domain.schemas.requests import (
    CheckoutRequest,
    PaymentFirstRequest,
    VerifyPaymentRequest,
)
from order_adaptor.services.order_service import OrderService

checkout_router = APIRouter()


@checkout_router.post("/validate", response_model=CheckoutValidation)
async def validate_checkout(
    request: CheckoutRequest,
    token: Optional[str] = Depends(get_bearer_token),
    order_service: OrderService = Depends(get_order_service)
):
    return await order_service.validate_checkout_for_payment(request, token=token)


@checkout_router.post("/initiate-payment", response_model=PaymentInitiation)
async def initiate_payment(
    request: PaymentFirstRequest,
    token: Optional[str] = Depends(get_bearer_token),
    order_service: OrderService = Depends(get_order_service)
):
    return await order_service.initiate_payment_first(request, token=token)


@checkout_router.get("/session/{session_id}", response_model=Dict[str, Any])
async def get_checkout_session(
    session_id: str = Path(...),
    token: Optional[str] = Depends(get_bearer_token),
    order_service: OrderService = Depends(get_order_service)
):
    return await order_service.get_checkout_session(session_id, token=token)


@checkout_router.post("/verify-payment")
async def verify_payment(
    request: VerifyPaymentRequest,
    token: Optional[str] = Depends(get_bearer_token),
    order_service: OrderService = Depends(get_order_service)
) -> Any:
    """Verifies the payment; the commerce API creates the order on success."""
    return await order_service.verify_payment_for_order(request.checkoutId, token=token)
