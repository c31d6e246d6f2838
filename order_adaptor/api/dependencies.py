from fastapi import Depends, Header, HTTPException, Request, status
from typing import Annotated, Optional

from order_adaptor.adapters.commerce_client import CommerceAPIClient
from order_adaptor.core.config import Settings, get_settings
from order_adaptor.core.logging import get_logger
from order_adaptor.services.order_service import OrderService

# Initialize logger
logger = get_logger(__name__)


async def get_settings_dependency() -> Settings:
    return get_settings()


async def get_commerce_client(request: Request) -> CommerceAPIClient:
    """
    Dependency for providing the shared commerce API client.

    The client is created at application startup and stored on the app state.
    """
    return request.app.state.commerce_client


async def get_order_service(
    client: CommerceAPIClient = Depends(get_commerce_client),
    settings: Settings = Depends(get_settings_dependency)
) -> OrderService:
    """
    Dependency for providing the order service.

    Returns:
        OrderService: Order facade bound to the shared client
    """
    return OrderService(
        client,
        analytics_zero_on_failure=settings.ANALYTICS_ZERO_ON_FAILURE
    )


async def get_bearer_token(
    authorization: Annotated[Optional[str], Header()] = None
) -> Optional[str]:
    """
    Extract the caller's bearer token from the Authorization header.

    The token is forwarded unchanged to the commerce API; it is not validated
    here.

    Args:
        authorization: Optional Authorization header value

    Returns:
        Optional[str]: The bearer token, or None for anonymous requests

    Raises:
        HTTPException: If the header uses a scheme other than Bearer
    """
    if not authorization or not authorization.strip():
        return None

    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        logger.warning("Rejected Authorization header with unsupported scheme")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header must use the Bearer scheme"
        )

    return token.strip()
