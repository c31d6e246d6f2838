"""
HTTP tests for the order, checkout and health routes.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from order_adaptor.adapters.commerce_client import CommerceAPIClient
from order_adaptor.main import create_application
from tests.fakes import BASE_URL, FakeCommerceAPI, envelope, error_envelope


@pytest.fixture
def api_client(commerce_api: FakeCommerceAPI):
    commerce_client = CommerceAPIClient(
        base_url=BASE_URL, transport=httpx.MockTransport(commerce_api)
    )
    app = create_application(commerce_client=commerce_client)
    with TestClient(app) as test_client:
        yield test_client


class TestHealthRoutes:
    """Tests for health endpoints."""

    def test_health(self, api_client: TestClient) -> None:
        response = api_client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "ok",
            "version": "0.1.0",
            "service": "Order Adaptor Service",
        }

    def test_detailed_health_ok(self, api_client: TestClient, commerce_api: FakeCommerceAPI) -> None:
        commerce_api.add("GET", "/health", {"status": "ok"})

        body = api_client.get("/api/v1/health/detailed").json()

        assert body["status"] == "ok"
        assert body["dependencies"][0]["name"] == "commerce_api"
        assert body["dependencies"][0]["status"] == "ok"

    def test_detailed_health_degraded(
        self, api_client: TestClient, commerce_api: FakeCommerceAPI
    ) -> None:
        commerce_api.add("GET", "/health", exc=httpx.ConnectError("refused"))

        body = api_client.get("/api/v1/health/detailed").json()

        assert body["status"] == "degraded"
        assert body["dependencies"][0]["status"] == "unavailable"


class TestOrderRoutes:
    """Tests for order endpoints."""

    def test_create_order(self, api_client: TestClient, commerce_api: FakeCommerceAPI) -> None:
        commerce_api.add(
            "POST",
            "/ecommerce/orders",
            envelope({"order": {"id": 1, "total": 20}, "payment": {"url": "https://pay"}}),
            status_code=201,
        )

        response = api_client.post(
            "/api/v1/orders", json={"products": [{"product_id": 5, "order_quantity": 2}]}
        )

        assert response.status_code == 201
        body = response.json()
        assert body["id"] == 1
        assert body["payment"]["url"] == "https://pay"

    def test_create_order_with_non_object_payment(
        self, api_client: TestClient, commerce_api: FakeCommerceAPI
    ) -> None:
        commerce_api.add(
            "POST",
            "/ecommerce/orders",
            envelope({"order": {"id": 1, "tracking_number": 20240001}, "payment": "https://pay"}),
            status_code=201,
        )

        response = api_client.post("/api/v1/orders", json={"items": [{"product_id": 5}]})

        assert response.status_code == 201
        body = response.json()
        assert body["payment"] == "https://pay"
        assert body["tracking_number"] == 20240001

    def test_create_order_rejects_invalid_quantity(
        self, api_client: TestClient, commerce_api: FakeCommerceAPI
    ) -> None:
        response = api_client.post(
            "/api/v1/orders", json={"products": [{"product_id": 5, "order_quantity": 0}]}
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "validation_error"
        assert commerce_api.requests == []

    def test_list_orders(self, api_client: TestClient, commerce_api: FakeCommerceAPI) -> None:
        commerce_api.add(
            "GET",
            "/ecommerce/orders",
            envelope([{"id": 1}], pagination={"total": 1, "current_page": 1, "per_page": 15, "last_page": 1}),
        )

        body = api_client.get("/api/v1/orders", params={"shop_id": "undefined"}).json()

        assert body["total"] == 1
        assert body["data"][0]["id"] == 1
        assert "shop_id" not in commerce_api.last_request.url.params

    def test_list_orders_rejects_non_numeric_shop(self, api_client: TestClient) -> None:
        response = api_client.get("/api/v1/orders", params={"shop_id": "abc"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "validation_error"

    def test_order_not_found(self, api_client: TestClient) -> None:
        response = api_client.get("/api/v1/orders/T404")

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "not_found_error"
        assert error["message"] == 'Order with ID/tracking "T404" not found'

    def test_update_status_forwards_bearer_token(
        self, api_client: TestClient, commerce_api: FakeCommerceAPI
    ) -> None:
        commerce_api.add("PUT", "/orders/42/status", envelope({"id": 42, "order_status": "completed"}))

        response = api_client.put(
            "/api/v1/orders/42/status",
            json={"order_status": "completed"},
            headers={"Authorization": "Bearer abc"},
        )

        assert response.status_code == 200
        assert response.json()["order_status"] == "completed"
        assert commerce_api.last_request.headers["Authorization"] == "Bearer abc"
        assert commerce_api.last_json() == {"order_status": "completed"}

    def test_non_bearer_authorization_is_rejected(
        self, api_client: TestClient, commerce_api: FakeCommerceAPI
    ) -> None:
        response = api_client.get("/api/v1/orders/1/status", headers={"Authorization": "Basic Zm9v"})

        assert response.status_code == 401
        assert commerce_api.requests == []

    def test_upstream_timeout_returns_504(
        self, api_client: TestClient, commerce_api: FakeCommerceAPI
    ) -> None:
        commerce_api.add("GET", "/orders/5/status", exc=httpx.ReadTimeout("timed out"))

        response = api_client.get("/api/v1/orders/5/status")

        assert response.status_code == 504
        error = response.json()["error"]
        assert error["code"] == "order_operation_failed"
        assert error["context"]["operation"] == "get_order_status"

    def test_analytics_zeroed_when_upstream_down(
        self, api_client: TestClient, commerce_api: FakeCommerceAPI
    ) -> None:
        commerce_api.add("GET", "/orders/analytics", exc=httpx.ConnectError("refused"))

        response = api_client.get("/api/v1/orders/analytics")

        assert response.status_code == 200
        assert response.json()["total_orders"] == 0

    def test_orders_by_customer(self, api_client: TestClient, commerce_api: FakeCommerceAPI) -> None:
        commerce_api.add("GET", "/orders", envelope([{"id": 8}]))

        body = api_client.get("/api/v1/orders/customer/7", params={"limit": 5}).json()

        assert body["data"][0]["id"] == 8
        assert body["per_page"] == 5
        assert commerce_api.last_request.url.params["customer_id"] == "7"

    def test_correlation_id_is_echoed(self, api_client: TestClient) -> None:
        response = api_client.get("/api/v1/health", headers={"X-Correlation-ID": "req-1"})

        assert response.headers["X-Correlation-ID"] == "req-1"


class TestCheckoutRoutes:
    """Tests for the payment-first checkout endpoints."""

    def test_initiate_payment_forwards_upstream_message(
        self, api_client: TestClient, commerce_api: FakeCommerceAPI
    ) -> None:
        commerce_api.add(
            "POST",
            "/ecommerce/payments/initiate-payment-first",
            error_envelope("Session expired"),
            status_code=400,
        )

        response = api_client.post(
            "/api/v1/checkout/initiate-payment", json={"sessionId": "s-1", "amount": 100}
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["message"] == "Session expired"
        assert error["context"]["upstream_status"] == 400

    def test_verify_payment(self, api_client: TestClient, commerce_api: FakeCommerceAPI) -> None:
        commerce_api.add(
            "POST", "/ecommerce/payments/verify-for-order", envelope({"order": {"id": 77}})
        )

        response = api_client.post("/api/v1/checkout/verify-payment", json={"checkoutId": "c-1"})

        assert response.status_code == 200
        assert response.json() == {"order": {"id": 77}}

    def test_validate_checkout(self, api_client: TestClient, commerce_api: FakeCommerceAPI) -> None:
        commerce_api.add(
            "POST",
            "/ecommerce/checkout/validate",
            envelope({"data": {"sessionId": "s-1", "validated": True}}),
        )

        body = api_client.post("/api/v1/checkout/validate", json={"amount": 50}).json()

        assert body["sessionId"] == "s-1"
        assert body["validated"] is True
