from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from typing import Dict, List, Optional

from order_adaptor.adapters.commerce_client import CommerceAPIClient
from order_adaptor.api.dependencies import get_commerce_client, get_settings_dependency
from order_adaptor.core.config import Settings
from order_adaptor.core.logging import get_logger

# Initialize router and logger
health_router = APIRouter()
logger = get_logger(__name__)


class HealthStatus(BaseModel):
    """Basic health status response model."""
    status: str
    version: str
    service: str


class DependencyStatus(BaseModel):
    """Status of a single dependency."""
    name: str
    status: str
    details: Optional[Dict] = None


class DetailedHealthStatus(HealthStatus):
    """Detailed health status with dependency information."""
    dependencies: List[DependencyStatus]


@health_router.get(
    "",
    response_model=HealthStatus,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
    description="Returns basic health status of the service."
)
async def get_health(settings: Settings = Depends(get_settings_dependency)) -> HealthStatus:
    """
    Basic health check endpoint.

    Returns:
        HealthStatus: Basic service health status
    """
    logger.debug("Health check requested")
    return HealthStatus(status="ok", version=settings.VERSION, service=settings.PROJECT_NAME)


@health_router.get(
    "/detailed",
    response_model=DetailedHealthStatus,
    status_code=status.HTTP_200_OK,
    summary="Detailed health check",
    description="Returns service health including commerce API reachability."
)
async def get_detailed_health(
    client: CommerceAPIClient = Depends(get_commerce_client),
    settings: Settings = Depends(get_settings_dependency)
) -> DetailedHealthStatus:
    """
    Detailed health check endpoint with dependency status.

    The service reports ``degraded`` while the commerce API is unreachable.
    """
    logger.debug("Detailed health check requested")

    commerce_ok = await client.check_health()
    dependencies = [
        DependencyStatus(
            name="commerce_api",
            status="ok" if commerce_ok else "unavailable",
            details={"base_url": client.base_url}
        ),
    ]

    return DetailedHealthStatus(
        status="ok" if commerce_ok else "degraded",
        version=settings.VERSION,
        service=settings.PROJECT_NAME,
        dependencies=dependencies
    )
