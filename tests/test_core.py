"""
Unit tests for settings, structured logging and the error hierarchy.
"""

import json
import logging

import pytest
from pydantic import ValidationError

from order_adaptor.core.config import Settings
from order_adaptor.core.exceptions import (
    CreatedOrderMappingError,
    IntegrationException,
    OrderNotFoundError,
    OrderServiceError,
    UpstreamAPIError,
    UpstreamTimeoutError,
    ValidationException,
)
from order_adaptor.core.logging import StructuredLogFormatter, correlation_id, set_correlation_id


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)

        assert settings.COMMERCE_API_URL == "https://api.ekasicart.com"
        assert settings.commerce_timeout_seconds == 12.0
        assert settings.health_check_timeout_seconds == 5.0
        assert settings.MAX_RETRIES == 0
        assert settings.ANALYTICS_ZERO_ON_FAILURE is True

    def test_api_timeout_source(self) -> None:
        settings = Settings(_env_file=None, COMMERCE_TIMEOUT_SOURCE="api", COMMERCE_API_TIMEOUT=20000)

        assert settings.commerce_timeout_seconds == 20.0

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COMMERCE_API_URL", "https://staging.commerce.test")
        monkeypatch.setenv("ANALYTICS_ZERO_ON_FAILURE", "false")

        settings = Settings(_env_file=None)

        assert settings.COMMERCE_API_URL == "https://staging.commerce.test"
        assert settings.ANALYTICS_ZERO_ON_FAILURE is False

    def test_cors_origins_from_comma_separated_string(self) -> None:
        settings = Settings(
            _env_file=None, BACKEND_CORS_ORIGINS="https://shop.test, https://admin.test"
        )

        assert settings.BACKEND_CORS_ORIGINS == ["https://shop.test", "https://admin.test"]

    def test_negative_retries_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, MAX_RETRIES=-1)

    def test_unknown_timeout_source_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, COMMERCE_TIMEOUT_SOURCE="server")


class TestExceptions:
    """Tests for error payloads."""

    def test_upstream_error_keeps_status_and_errors(self) -> None:
        error = UpstreamAPIError(status_code=422, detail="Invalid", errors={"email": ["taken"]})

        assert isinstance(error, IntegrationException)
        assert error.to_dict() == {
            "error": {
                "code": "upstream_error",
                "message": "Invalid",
                "status_code": 422,
                "context": {"errors": {"email": ["taken"]}},
            }
        }

    def test_timeout_records_original_error(self) -> None:
        error = UpstreamTimeoutError(original_exception=TimeoutError("slow"))

        assert error.status_code == 504
        assert error.context["original_error"] == "slow"

    def test_order_service_error_context(self) -> None:
        error = OrderServiceError(
            operation="cancel",
            detail="Failed to cancel order 3",
            status_code=409,
            upstream_message="Order already shipped",
            upstream_status=409,
        )

        assert error.to_dict()["error"]["context"] == {
            "operation": "cancel",
            "upstream_message": "Order already shipped",
            "upstream_status": 409,
            "errors": {},
        }

    def test_not_found_is_an_order_service_error(self) -> None:
        error = OrderNotFoundError("T1", upstream_status=404)

        assert isinstance(error, OrderServiceError)
        assert error.status_code == 404
        assert error.code == "not_found_error"
        assert error.identifier == "T1"

    def test_created_order_mapping_error_carries_order_id(self) -> None:
        error = CreatedOrderMappingError(31, upstream_status=201)

        assert isinstance(error, OrderServiceError)
        assert error.status_code == 502
        assert error.to_dict()["error"]["context"]["order_id"] == 31
        assert error.context["operation"] == "create"

    def test_validation_exception_is_422(self) -> None:
        error = ValidationException(detail="Bad payload", context={"payload_type": "str"})

        assert error.status_code == 422
        assert error.context == {"payload_type": "str"}


class TestStructuredLogging:
    """Tests for the JSON log formatter."""

    def test_formats_record_with_data_and_correlation_id(self) -> None:
        token = correlation_id.set("")
        try:
            set_correlation_id("corr-1")
            record = logging.LogRecord(
                name="order_adaptor.test",
                level=logging.INFO,
                pathname=__file__,
                lineno=1,
                msg="Created order %s",
                args=(5,),
                exc_info=None,
            )
            record.data = {"order_id": 5}

            entry = json.loads(StructuredLogFormatter().format(record))
        finally:
            correlation_id.reset(token)

        assert entry["message"] == "Created order 5"
        assert entry["level"] == "INFO"
        assert entry["correlation_id"] == "corr-1"
        assert entry["order_id"] == 5

    def test_generates_correlation_id_when_missing(self) -> None:
        token = correlation_id.set("")
        try:
            generated = set_correlation_id()
            assert generated
            assert correlation_id.get() == generated
        finally:
            correlation_id.reset(token)
