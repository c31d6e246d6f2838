from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class OrderStatus(str, Enum):
    """Order lifecycle states understood by the storefront."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    FAILED = "failed"
    AT_LOCAL_FACILITY = "at-local-facility"
    OUT_FOR_DELIVERY = "out-for-delivery"


class PaymentStatus(str, Enum):
    """Payment states understood by the storefront."""
    PENDING = "pending"
    PROCESSING = "processing"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    CASH_ON_DELIVERY = "cash-on-delivery"
    WALLET = "wallet"


class OrderProduct(BaseModel):
    """A line item in storefront format."""
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    product_id: Optional[Union[int, str]] = None
    variation_option_id: Optional[Union[int, str]] = None
    name: Optional[str] = None
    order_quantity: Union[int, float] = 1
    unit_price: Optional[float] = 0
    subtotal: Optional[float] = 0


class OrderCustomer(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: Optional[Union[int, str]] = None
    name: Optional[str] = None
    email: Optional[str] = None
    contact: Optional[str] = None


class PaymentDetails(BaseModel):
    """Payment data returned alongside a freshly created order."""
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    url: Optional[str] = None


class GPSTracking(BaseModel):
    """Live delivery tracking built from the upstream order fields."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    trackingEnabled: bool
    trackingUrl: Optional[str] = None
    deliveryService: Optional[str] = None
    orderId: Optional[Union[int, str]] = None
    orderNumber: Optional[Union[int, str]] = None
    orderStatus: Optional[str] = None


class Order(BaseModel):
    """Order in storefront format. Unknown upstream fields are kept."""
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: Optional[Union[int, str]] = None
    tracking_number: Optional[Union[int, str]] = None
    customer_id: Optional[Union[int, str]] = None
    customer_name: Optional[str] = None
    customer_contact: Optional[str] = None
    customer: Optional[OrderCustomer] = None
    shop_id: Optional[Union[int, str]] = None
    order_status: str = OrderStatus.PENDING.value
    payment_status: str = PaymentStatus.PENDING.value
    amount: Optional[float] = 0
    sales_tax: Optional[float] = 0
    delivery_fee: Optional[float] = 0
    discount: Optional[float] = 0
    total: Optional[float] = 0
    paid_total: Optional[float] = 0
    coupon_id: Optional[Union[int, str]] = None
    payment_gateway: Optional[str] = None
    products: List[OrderProduct] = Field(default_factory=list)
    billing_address: Optional[Any] = None
    shipping_address: Optional[Any] = None
    delivery_time: Optional[str] = None
    note: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    payment: Optional[Union[PaymentDetails, Any]] = Field(None, union_mode="left_to_right")
    gps_tracking: Optional[GPSTracking] = None


class OrderPaginator(BaseModel):
    """A page of orders with its pagination metadata."""
    data: List[Order] = Field(default_factory=list)
    total: int = 0
    current_page: int = 1
    per_page: int = 15
    last_page: int = 1
    count: int = 0


class OrderStatusSnapshot(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: Optional[Union[int, str]] = None
    order_status: str = OrderStatus.PENDING.value
    payment_status: str = PaymentStatus.PENDING.value
    updated_at: Optional[str] = None


class PaymentResult(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    success: bool = True
    payment_intent: Optional[Any] = None
    transaction_id: Optional[Union[int, str]] = None
    message: str = "Payment processed successfully"


class OrderInvoice(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    invoice_url: Optional[str] = None
    invoice_number: Optional[Union[int, str]] = None
    generated_at: Optional[str] = None


class OrderTracking(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    tracking_number: Optional[Union[int, str]] = None
    status: Optional[str] = None
    tracking_events: List[Any] = Field(default_factory=list)
    estimated_delivery: Optional[str] = None
    carrier: Optional[str] = None


class CheckoutVerification(BaseModel):
    unavailable_products: List[Any] = Field(default_factory=list)
    total_tax: float = 0
    shipping_charge: float = 0
    shipping_zone: Any = ""
    estimated_delivery: Any = ""
    available_coupons: List[Any] = Field(default_factory=list)


class OrderAnalytics(BaseModel):
    """Aggregate order figures. All zero when the upstream is unavailable."""
    total_orders: int = 0
    total_revenue: float = 0
    pending_orders: int = 0
    completed_orders: int = 0
    cancelled_orders: int = 0
    average_order_value: float = 0


class CheckoutValidation(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    sessionId: Optional[Union[int, str]] = None
    validated: bool = False
    message: Optional[str] = None


class PaymentInitiation(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    transactionId: Optional[Union[int, str]] = None
    checkoutId: Optional[Union[int, str]] = None
    paymentUrl: Optional[str] = None
    status: Optional[str] = None
    message: Optional[str] = None
