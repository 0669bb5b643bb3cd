import httpx
import pytest

from order_service.customers_http import HttpCustomerDirectory
from order_service.models import Customer


def _handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/queries/customers/C-1":
        return httpx.Response(200, json={"id": "C-1", "name": "Carol", "email": None, "tier": "gold"})
    if request.url.path == "/queries/customers/broken":
        return httpx.Response(503, json={"detail": "unavailable"})
    return httpx.Response(404, json={"detail": "Customer not found"})


@pytest.fixture
async def directory():
    async with httpx.AsyncClient(transport=httpx.MockTransport(_handler)) as client:
        yield HttpCustomerDirectory(client, "http://customers.local/")


async def test_found(directory):
    assert await directory.find_by_id("C-1") == Customer(id="C-1", name="Carol")


async def test_not_found_is_absent(directory):
    assert await directory.find_by_id("ghost") is None


async def test_server_error_propagates(directory):
    with pytest.raises(httpx.HTTPStatusError):
        await directory.find_by_id("broken")
