"""
Field mapping between the storefront order format and the commerce API format.

The storefront speaks in ``products``/``order_quantity``/``amount``/``sales_tax``
while the commerce API uses ``items``/``quantity``/``sub_total``/``tax``.
Fields without a mapping pass through unchanged in both directions.
"""
import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from order_adaptor.core.exceptions import ValidationException
from order_adaptor.domain.models.order import Order

# storefront name -> upstream name
ORDER_FIELD_MAP: Dict[str, str] = {
    "amount": "sub_total",
    "sales_tax": "tax",
    "delivery_fee": "shipping_charge",
    "payment_gateway": "payment_method",
    "note": "notes",
    "customer_contact": "customer_phone",
}

LINE_FIELD_MAP: Dict[str, str] = {
    "order_quantity": "quantity",
    "variation_option_id": "variation_id",
}

CUSTOMER_FIELD_MAP: Dict[str, str] = {
    "contact": "phone",
}


def _rename(data: Dict[str, Any], mapping: Dict[str, str]) -> Dict[str, Any]:
    """
    Rename mapped keys. When a payload already carries the target name as
    well, the value of the mapped source key wins regardless of key order.
    """
    renamed = {key: value for key, value in data.items() if key not in mapping}
    for source, target in mapping.items():
        if source in data:
            renamed[target] = data[source]
    return renamed


def _invert(mapping: Dict[str, str]) -> Dict[str, str]:
    return {value: key for key, value in mapping.items()}


def to_upstream_order(draft: BaseModel) -> Dict[str, Any]:
    """
    Convert a storefront order draft into the commerce API payload.

    Unset fields are omitted so the same function serves creation and
    partial updates.
    """
    data = draft.model_dump(mode="json", exclude_none=True)
    products = data.pop("products", None)
    customer = data.pop("customer", None)

    payload = _rename(data, ORDER_FIELD_MAP)

    if products is not None:
        payload["items"] = [_rename(line, LINE_FIELD_MAP) for line in products]

    if customer is not None:
        payload["customer"] = _rename(customer, CUSTOMER_FIELD_MAP)

    return payload


def to_storefront_order(raw: Any) -> Order:
    """
    Convert a commerce API order into the storefront ``Order`` model.

    Raises:
        ValidationException: If the payload is not an order object
    """
    if not isinstance(raw, dict):
        raise ValidationException(
            detail="Unexpected order payload from commerce API",
            context={"payload_type": type(raw).__name__}
        )

    data = _rename(raw, _invert(ORDER_FIELD_MAP))

    items = data.pop("items", None)
    if items is not None and "products" not in data:
        data["products"] = [
            _to_storefront_line(line) for line in items if isinstance(line, dict)
        ]

    customer = data.get("customer")
    if isinstance(customer, dict):
        customer = _rename(customer, _invert(CUSTOMER_FIELD_MAP))
        data["customer"] = customer
        for field, source in (("customer_id", "id"), ("customer_name", "name"), ("customer_contact", "contact")):
            if data.get(field) is None:
                data[field] = customer.get(source)
    elif customer is not None:
        data.pop("customer")

    # Upstream sends null for statuses it has not set yet
    for status_field in ("order_status", "payment_status"):
        if data.get(status_field) is None:
            data.pop(status_field, None)

    if data.get("paid_total") is None and data.get("total") is not None:
        data["paid_total"] = data["total"]

    return Order.model_validate(data)


def _to_storefront_line(line: Dict[str, Any]) -> Dict[str, Any]:
    converted = _rename(line, _invert(LINE_FIELD_MAP))
    if "name" not in converted and "product_name" in converted:
        converted["name"] = converted.pop("product_name")
    return converted


def to_storefront_orders(raw: Any) -> List[Order]:
    """Convert a list payload into orders; anything other than a list yields ``[]``."""
    if not isinstance(raw, list):
        return []
    return [to_storefront_order(item) for item in raw]


def extract_pagination(
    envelope: Any,
    count: int,
    page: int = 1,
    limit: int = 15
) -> Dict[str, int]:
    """
    Build pagination metadata from the raw commerce API response.

    Metadata is read from ``pagination`` or ``meta`` in the envelope, falling
    back to top-level keys, and finally to the requested page and limit.
    """
    meta: Dict[str, Any] = {}
    if isinstance(envelope, dict):
        for key in ("pagination", "meta"):
            if isinstance(envelope.get(key), dict):
                meta = envelope[key]
                break
        else:
            meta = envelope

    per_page = _as_int(_first(meta, "per_page", "limit"), limit) or limit
    current_page = _as_int(_first(meta, "current_page", "page"), page)
    total = _as_int(_first(meta, "total", "total_count"), count)
    last_page = _as_int(
        _first(meta, "last_page", "total_pages", "pages"),
        max(1, math.ceil(total / per_page)) if per_page else 1,
    )

    return {
        "total": total,
        "current_page": current_page,
        "per_page": per_page,
        "last_page": last_page,
        "count": count,
    }


def _first(data: Dict[str, Any], *keys: str) -> Optional[Any]:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default
