from typing import Any, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from order_adaptor.domain.models.order import OrderStatus, PaymentStatus


class OrderLineInput(BaseModel):
    """A line item as sent by the storefront."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    product_id: Union[int, str]
    variation_option_id: Optional[Union[int, str]] = None
    order_quantity: int = Field(
        1, ge=1, validation_alias=AliasChoices("order_quantity", "quantity")
    )
    unit_price: Optional[float] = Field(None, ge=0)
    subtotal: Optional[float] = Field(None, ge=0)


class CustomerInput(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[int, str]] = None
    name: Optional[str] = None
    email: Optional[str] = None
    contact: Optional[str] = None


class OrderDraftFields(BaseModel):
    """Fields shared by order creation and update."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    customer_id: Optional[Union[int, str]] = None
    customer_name: Optional[str] = None
    customer_contact: Optional[str] = None
    customer: Optional[CustomerInput] = None
    shop_id: Optional[Union[int, str]] = None
    amount: Optional[float] = Field(None, ge=0)
    sales_tax: Optional[float] = Field(None, ge=0)
    delivery_fee: Optional[float] = Field(None, ge=0)
    discount: Optional[float] = Field(None, ge=0)
    total: Optional[float] = Field(None, ge=0)
    paid_total: Optional[float] = Field(None, ge=0)
    coupon_id: Optional[Union[int, str]] = None
    payment_gateway: Optional[str] = None
    billing_address: Optional[Dict[str, Any]] = None
    shipping_address: Optional[Dict[str, Any]] = None
    delivery_time: Optional[str] = None
    note: Optional[str] = None
    use_wallet_points: Optional[bool] = None


class CreateOrderRequest(OrderDraftFields):
    """Order draft submitted by the storefront. Accepts ``products`` or ``items``."""
    products: List[OrderLineInput] = Field(
        default_factory=list,
        validation_alias=AliasChoices("products", "items"),
    )


class UpdateOrderRequest(OrderDraftFields):
    """Partial order update; only the fields that are set are forwarded."""
    products: Optional[List[OrderLineInput]] = Field(
        None, validation_alias=AliasChoices("products", "items")
    )
    order_status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None


class GetOrdersQuery(BaseModel):
    """Filters accepted by the order listing."""
    limit: Optional[int] = Field(None, ge=1)
    page: Optional[int] = Field(None, ge=1)
    customer_id: Optional[Union[int, str]] = None
    tracking_number: Optional[str] = None
    search: Optional[str] = None
    shop_id: Optional[int] = None

    @field_validator("shop_id", mode="before")
    @classmethod
    def drop_undefined_shop(cls, v: Any) -> Any:
        # Storefront clients send the literal string "undefined" for a missing shop
        if v in ("", "undefined"):
            return None
        return v


class OrderListOptions(BaseModel):
    """Paging and filters for the per-customer and per-shop listings."""
    model_config = ConfigDict(extra="forbid")

    page: int = Field(1, ge=1)
    limit: int = Field(15, ge=1)
    order_status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    search: Optional[str] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = Field(None, pattern="^(asc|desc)$")


class UpdateOrderStatusRequest(BaseModel):
    order_status: OrderStatus


class UpdatePaymentStatusRequest(BaseModel):
    payment_status: PaymentStatus


class PaymentRequest(BaseModel):
    """Payment submission for an existing order."""
    model_config = ConfigDict(extra="allow")

    payment_gateway: str
    amount: Optional[float] = Field(None, ge=0)
    token: Optional[str] = None
    return_url: Optional[str] = None


class CheckoutRequest(BaseModel):
    """Cart contents used for checkout verification and validation."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    amount: Optional[float] = Field(None, ge=0)
    products: List[OrderLineInput] = Field(
        default_factory=list,
        validation_alias=AliasChoices("products", "items"),
    )
    billing_address: Optional[Dict[str, Any]] = None
    shipping_address: Optional[Dict[str, Any]] = None
    customer_id: Optional[Union[int, str]] = None
    shop_id: Optional[Union[int, str]] = None
    coupon_id: Optional[Union[int, str]] = None
    payment_gateway: Optional[str] = None


class PaymentFirstRequest(BaseModel):
    """Payment initiation for a validated checkout session."""
    model_config = ConfigDict(extra="allow")

    sessionId: str
    amount: float = Field(..., ge=0)
    currency: Optional[str] = None
    payment_gateway: Optional[str] = None
    return_url: Optional[str] = None


class VerifyPaymentRequest(BaseModel):
    checkoutId: str = Field(..., min_length=1)
