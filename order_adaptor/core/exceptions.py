from fastapi import status
from typing import Any, Dict, Optional


class APIException(Exception):
    """
    Base exception for API errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        code: str = "internal_error",
        context: Optional[Dict[str, Any]] = None
    ):
        self.status_code = status_code
        self.detail = detail
        self.code = code
        self.context = context or {}
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for consistent response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.detail,
                "status_code": self.status_code,
                "context": self.context
            }
        }


class IntegrationException(APIException):
    """Exception raised when a call to the commerce API fails."""

    def __init__(
        self,
        detail: str = "External API integration error",
        code: str = "integration_error",
        status_code: int = status.HTTP_502_BAD_GATEWAY,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(status_code=status_code, detail=detail, code=code, context=context)
        self.original_exception = original_exception

        if original_exception and self.context is not None:
            self.context["original_error"] = str(original_exception)


class UpstreamAPIError(IntegrationException):
    """
    The commerce API answered with its error envelope.

    Carries the HTTP status of the upstream response, its message and the
    field-error map from ``errors``.
    """

    def __init__(
        self,
        status_code: int,
        detail: str = "An error occurred",
        errors: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.errors = errors or {}
        super().__init__(
            detail=detail,
            code="upstream_error",
            status_code=status_code,
            context={"errors": self.errors},
            original_exception=original_exception
        )


class UpstreamTimeoutError(IntegrationException):
    """The commerce API did not answer within the configured timeout."""

    def __init__(
        self,
        detail: str = "Request timeout - Commerce API not responding",
        original_exception: Optional[Exception] = None
    ):
        super().__init__(
            detail=detail,
            code="upstream_timeout",
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            original_exception=original_exception
        )


class UpstreamNetworkError(IntegrationException):
    """The commerce API could not be reached."""

    def __init__(
        self,
        detail: str = "Network error - Unable to reach Commerce API",
        original_exception: Optional[Exception] = None
    ):
        super().__init__(
            detail=detail,
            code="upstream_unreachable",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            original_exception=original_exception
        )


class OrderServiceError(APIException):
    """
    Exception raised when an order operation fails.

    ``detail`` names the failed operation. The upstream status, message and
    field errors are kept in ``context`` so callers can still inspect them.
    """

    def __init__(
        self,
        operation: str,
        detail: str,
        status_code: int = status.HTTP_502_BAD_GATEWAY,
        code: str = "order_operation_failed",
        upstream_message: Optional[str] = None,
        upstream_status: Optional[int] = None,
        errors: Optional[Dict[str, Any]] = None
    ):
        self.operation = operation
        self.upstream_message = upstream_message
        self.upstream_status = upstream_status
        self.errors = errors or {}
        super().__init__(
            status_code=status_code,
            detail=detail,
            code=code,
            context={
                "operation": operation,
                "upstream_message": upstream_message,
                "upstream_status": upstream_status,
                "errors": self.errors
            }
        )


class OrderNotFoundError(OrderServiceError):
    """Exception raised when an order cannot be found by ID or tracking number."""

    def __init__(self, identifier: str, **kwargs: Any):
        self.identifier = identifier
        super().__init__(
            operation="get_order_by_id_or_tracking_number",
            detail=f'Order with ID/tracking "{identifier}" not found',
            status_code=status.HTTP_404_NOT_FOUND,
            code="not_found_error",
            **kwargs
        )


class CreatedOrderMappingError(OrderServiceError):
    """
    The commerce API created the order but its response could not be mapped.

    The upstream order ID is kept in ``context`` so the order can be looked
    up instead of being submitted again.
    """

    def __init__(self, order_id: Optional[Any], **kwargs: Any):
        self.order_id = order_id
        super().__init__(
            operation="create",
            detail=f"Order {order_id} was created but the commerce API response could not be read",
            code="order_response_invalid",
            **kwargs
        )
        self.context["order_id"] = order_id


class ValidationException(APIException):
    """Exception raised when data validation fails."""

    def __init__(
        self,
        detail: str = "Validation error",
        code: str = "validation_error",
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            code=code,
            context=context
        )
