import httpx
import pytest
import pytest_asyncio

from order_adaptor.adapters.commerce_client import CommerceAPIClient
from order_adaptor.core.config import get_settings
from order_adaptor.services.order_service import OrderService
from tests.fakes import BASE_URL, FakeCommerceAPI


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def commerce_api() -> FakeCommerceAPI:
    return FakeCommerceAPI()


@pytest_asyncio.fixture
async def client(commerce_api: FakeCommerceAPI):
    async with CommerceAPIClient(
        base_url=BASE_URL,
        transport=httpx.MockTransport(commerce_api),
    ) as commerce_client:
        yield commerce_client


@pytest.fixture
def order_service(client: CommerceAPIClient) -> OrderService:
    return OrderService(client)
