import time
import uuid
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from order_adaptor.adapters.commerce_client import CommerceAPIClient
from order_adaptor.api.error_handlers import register_exception_handlers
from order_adaptor.core.config import get_settings, load_env_file
from order_adaptor.core.logging import configure_logging, get_logger, set_correlation_id


# Load environment variables and configure logging early
load_env_file()
configure_logging()
logger = get_logger(__name__)


def create_application(commerce_client: Optional[CommerceAPIClient] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        commerce_client: Optional pre-built client. When omitted, one is
            created from settings at startup and closed at shutdown.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting up Order Adaptor Service")
        owns_client = commerce_client is None
        app.state.commerce_client = commerce_client or CommerceAPIClient.from_settings(settings)
        try:
            yield
        finally:
            logger.info("Shutting down Order Adaptor Service")
            if owns_client:
                await app.state.commerce_client.close()

    # Create FastAPI app with metadata
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        docs_url=f"{settings.API_V1_STR}/docs",
        redoc_url=f"{settings.API_V1_STR}/redoc",
        debug=settings.DEBUG,
        lifespan=lifespan
    )

    configure_middleware(app)
    register_exception_handlers(app)
    register_routers(app)

    return app


def configure_middleware(app: FastAPI) -> None:
    """
    Configure middleware components for the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    settings = get_settings()

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request tracking middleware
    @app.middleware("http")
    async def add_correlation_id(request: Request, call_next: Callable):
        corr_id = set_correlation_id(request.headers.get("X-Correlation-ID"))

        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"Request failed: {str(e)}",
                extra={"data": {
                    "request_path": request.url.path,
                    "method": request.method,
                    "process_time_ms": round(process_time * 1000, 2),
                }},
                exc_info=True
            )
            raise

        response.headers["X-Correlation-ID"] = corr_id

        process_time = time.time() - start_time
        logger.info(
            "Request completed",
            extra={"data": {
                "request_path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "process_time_ms": round(process_time * 1000, 2),
            }}
        )

        return response


def register_routers(app: FastAPI) -> None:
    """
    Register API routers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    settings = get_settings()

    # Import routers here to avoid circular imports
    from order_adaptor.api.routes.checkout import checkout_router
    from order_adaptor.api.routes.health import health_router
    from order_adaptor.api.routes.orders import orders_router

    app.include_router(
        health_router,
        prefix=f"{settings.API_V1_STR}/health",
        tags=["Health"]
    )

    app.include_router(
        orders_router,
        prefix=f"{settings.API_V1_STR}/orders",
        tags=["Orders"]
    )

    app.include_router(
        checkout_router,
        prefix=f"{settings.API_V1_STR}/checkout",
        tags=["Checkout"]
    )


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("order_adaptor.main:app", host="0.0.0.0", port=8000, reload=True)
