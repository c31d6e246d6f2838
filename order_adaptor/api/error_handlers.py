from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from order_adaptor.core.exceptions import (
    APIException,
    IntegrationException,
    OrderNotFoundError,
    OrderServiceError,
)
from order_adaptor.core.logging import get_logger

# Initialize logger
logger = get_logger(__name__)


async def handle_api_exception(request: Request, exc: APIException) -> JSONResponse:
    """
    Handle APIException instances.

    Args:
        request: FastAPI request object
        exc: APIException instance

    Returns:
        JSONResponse: Formatted error response
    """
    logger.error(
        f"API Exception: {exc.detail}",
        extra={"data": {
            "status_code": exc.status_code,
            "error_code": exc.code,
            "context": exc.context
        }}
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def handle_not_found_exception(request: Request, exc: OrderNotFoundError) -> JSONResponse:
    """Handle orders that could not be found by ID or tracking number."""
    logger.info(
        f"Resource not found: {exc.detail}",
        extra={"data": {"identifier": exc.identifier}}
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def handle_order_service_exception(request: Request, exc: OrderServiceError) -> JSONResponse:
    """
    Handle failed order operations.

    The upstream message and field errors stay in the context so the
    storefront can show field-level feedback.
    """
    logger.error(
        f"Order operation failed: {exc.detail}",
        extra={"data": {"operation": exc.operation, "upstream_status": exc.upstream_status}}
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def handle_integration_exception(request: Request, exc: IntegrationException) -> JSONResponse:
    """
    Handle commerce API integration errors raised outside the order service.

    Args:
        request: FastAPI request object
        exc: IntegrationException instance

    Returns:
        JSONResponse: Formatted integration error response
    """
    logger.error(
        f"Integration error: {exc.detail}",
        extra={"data": {"context": exc.context}}
    )

    # Keep the original error in the logs only
    safe_context = {k: v for k, v in exc.context.items() if k != "original_error"}

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.code,
                "message": exc.detail,
                "status_code": exc.status_code,
                "context": safe_context
            }
        }
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors."""
    errors = [
        {"loc": error["loc"], "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": {
                "code": "validation_error",
                "message": "Request validation error",
                "status_code": status.HTTP_422_UNPROCESSABLE_ENTITY,
                "context": {
                    "errors": errors
                }
            }
        }
    )


async def handle_model_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle request structs that fail validation inside the order service."""
    errors = [
        {"loc": error["loc"], "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]
    logger.warning(f"Validation error: {exc.title}", extra={"data": {"errors": errors}})

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": {
                "code": "validation_error",
                "message": f"Invalid {exc.title}",
                "status_code": status.HTTP_422_UNPROCESSABLE_ENTITY,
                "context": {
                    "errors": errors
                }
            }
        }
    )


async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred",
                "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR
            }
        }
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Configure global exception handlers for the FastAPI application.

    Starlette resolves handlers by the exception's MRO, so the most
    specific class wins.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(OrderNotFoundError, handle_not_found_exception)
    app.add_exception_handler(OrderServiceError, handle_order_service_exception)
    app.add_exception_handler(IntegrationException, handle_integration_exception)
    app.add_exception_handler(APIException, handle_api_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(ValidationError, handle_model_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_exception)
