"""
Unit tests for storefront/commerce payload mapping.
"""

import pytest

from order_adaptor.adapters.transformer import (
    extract_pagination,
    to_storefront_order,
    to_storefront_orders,
    to_upstream_order,
)
from order_adaptor.core.exceptions import ValidationException
from order_adaptor.domain.schemas.requests import CreateOrderRequest, UpdateOrderRequest


class TestToUpstreamOrder:
    """Tests for storefront -> commerce mapping."""

    def test_renames_order_line_and_customer_fields(self) -> None:
        draft = CreateOrderRequest.model_validate({
            "products": [{"product_id": 5, "order_quantity": 2, "variation_option_id": 9}],
            "customer": {"name": "Ann", "contact": "0821234567"},
            "amount": 100,
            "sales_tax": 15,
            "delivery_fee": 20,
            "payment_gateway": "cash_on_delivery",
            "note": "Leave at gate",
        })

        payload = to_upstream_order(draft)

        assert payload["items"] == [{"product_id": 5, "quantity": 2, "variation_id": 9}]
        assert payload["customer"] == {"name": "Ann", "phone": "0821234567"}
        assert payload["sub_total"] == 100
        assert payload["tax"] == 15
        assert payload["shipping_charge"] == 20
        assert payload["payment_method"] == "cash_on_delivery"
        assert payload["notes"] == "Leave at gate"
        assert "products" not in payload
        assert "amount" not in payload

    def test_items_alias_is_accepted(self) -> None:
        draft = CreateOrderRequest.model_validate({"items": [{"product_id": 1, "quantity": 3}]})

        payload = to_upstream_order(draft)

        assert payload["items"] == [{"product_id": 1, "quantity": 3}]

    def test_unset_fields_are_omitted(self) -> None:
        patch = UpdateOrderRequest.model_validate({"note": "Call on arrival"})

        assert to_upstream_order(patch) == {"notes": "Call on arrival"}

    def test_unknown_fields_pass_through(self) -> None:
        draft = CreateOrderRequest.model_validate({"products": [], "channel": "whatsapp"})

        payload = to_upstream_order(draft)

        assert payload["channel"] == "whatsapp"
        assert payload["items"] == []

    def test_storefront_field_wins_over_upstream_name(self) -> None:
        draft = CreateOrderRequest.model_validate({"products": [], "sub_total": 1, "amount": 100})

        assert to_upstream_order(draft)["sub_total"] == 100


class TestToStorefrontOrder:
    """Tests for commerce -> storefront mapping."""

    def test_maps_items_and_totals(self) -> None:
        order = to_storefront_order({
            "id": 10,
            "tracking_number": "T10",
            "items": [{"product_id": 5, "quantity": 2, "product_name": "Bread"}],
            "sub_total": 40,
            "tax": 6,
            "shipping_charge": 10,
            "total": 56,
            "order_status": "processing",
            "payment_status": "paid",
        })

        assert order.id == 10
        assert order.amount == 40
        assert order.sales_tax == 6
        assert order.delivery_fee == 10
        assert order.products[0].order_quantity == 2
        assert order.products[0].name == "Bread"
        assert order.order_status == "processing"
        assert order.payment_status == "paid"

    def test_paid_total_defaults_to_total(self) -> None:
        order = to_storefront_order({"id": 1, "total": 56})

        assert order.paid_total == 56

    def test_null_statuses_read_as_pending(self) -> None:
        order = to_storefront_order({"id": 1, "order_status": None, "payment_status": None})

        assert order.order_status == "pending"
        assert order.payment_status == "pending"

    def test_customer_fields_filled_from_customer(self) -> None:
        order = to_storefront_order({
            "id": 1,
            "customer_name": None,
            "customer": {"id": 3, "name": "Ann", "phone": "082"},
        })

        assert order.customer_id == 3
        assert order.customer_name == "Ann"
        assert order.customer_contact == "082"
        assert order.customer.contact == "082"

    def test_unknown_fields_are_kept(self) -> None:
        order = to_storefront_order({"id": 1, "wallet_point": 5})

        assert order.model_dump()["wallet_point"] == 5

    def test_non_object_payload_is_rejected(self) -> None:
        with pytest.raises(ValidationException):
            to_storefront_order("unexpected")

    def test_non_list_yields_no_orders(self) -> None:
        assert to_storefront_orders({"unexpected": True}) == []
        assert to_storefront_orders(None) == []

    def test_numeric_identifiers_and_contacts_are_accepted(self) -> None:
        order = to_storefront_order({
            "id": 1,
            "tracking_number": 20240001,
            "customer_phone": 27821234567,
            "created_at": 1700000000,
            "customer": {"id": 3, "phone": 27821234567},
        })

        assert order.tracking_number == 20240001
        assert order.customer_contact == "27821234567"
        assert order.customer.contact == "27821234567"
        assert order.created_at == "1700000000"

    def test_fractional_quantity_and_free_text_address(self) -> None:
        order = to_storefront_order({
            "id": 1,
            "items": [{"product_id": 5, "quantity": 1.5}],
            "shipping_address": "12 Main Rd, Soweto",
        })

        assert order.products[0].order_quantity == 1.5
        assert order.shipping_address == "12 Main Rd, Soweto"

    @pytest.mark.parametrize(
        "raw",
        [
            {"id": 1, "amount": 5, "sub_total": 40},
            {"id": 1, "sub_total": 40, "amount": 5},
        ],
    )
    def test_upstream_name_wins_over_storefront_name(self, raw) -> None:
        assert to_storefront_order(raw).amount == 40


class TestExtractPagination:
    """Tests for pagination metadata extraction."""

    def test_reads_pagination_block(self) -> None:
        envelope = {
            "status": "success",
            "data": [],
            "pagination": {"total": 40, "current_page": 2, "per_page": 15, "last_page": 3},
        }

        assert extract_pagination(envelope, count=15, page=1, limit=10) == {
            "total": 40,
            "current_page": 2,
            "per_page": 15,
            "last_page": 3,
            "count": 15,
        }

    def test_reads_meta_block_with_alternate_keys(self) -> None:
        envelope = {"meta": {"total_count": 30, "page": 2, "limit": 10, "total_pages": 3}}

        result = extract_pagination(envelope, count=10)

        assert result["total"] == 30
        assert result["current_page"] == 2
        assert result["per_page"] == 10
        assert result["last_page"] == 3

    def test_falls_back_to_request(self) -> None:
        result = extract_pagination({"status": "success", "data": []}, count=4, page=3, limit=5)

        assert result == {"total": 4, "current_page": 3, "per_page": 5, "last_page": 1, "count": 4}

    def test_derives_last_page_from_total(self) -> None:
        result = extract_pagination({"total": 31}, count=15, page=1, limit=15)

        assert result["last_page"] == 3
