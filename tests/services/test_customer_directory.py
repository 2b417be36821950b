"""HTTP Customer Directory — tests over httpx.MockTransport.

Invariants:
    - 404 → None; 200 → status parsed case-insensitively
    - 5xx, transport errors, and malformed bodies → CustomerServiceUnavailableError
"""

from uuid import uuid4

import httpx
import pytest

from transfer_service.core.domain_types import CustomerId, CustomerStatus
from transfer_service.core.errors import CustomerServiceUnavailableError
from transfer_service.infrastructure.customer_directory import HttpCustomerDirectory


def _directory(handler) -> HttpCustomerDirectory:
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="http://customers",
    )
    return HttpCustomerDirectory(client)


async def test_active_customer():
    customer = CustomerId(uuid4())
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(200, json={"data": {"id": str(customer), "status": "Active"}})

    assert await _directory(handler).get_status(customer) == CustomerStatus.ACTIVE
    assert seen == [f"/api/customers/{customer}"]


async def test_blocked_customer():
    directory = _directory(
        lambda r: httpx.Response(200, json={"data": {"status": "blocked"}}),
    )
    assert await directory.get_status(CustomerId(uuid4())) == CustomerStatus.BLOCKED


async def test_unknown_customer():
    directory = _directory(lambda r: httpx.Response(404))
    assert await directory.get_status(CustomerId(uuid4())) is None


async def test_server_error():
    directory = _directory(lambda r: httpx.Response(500))
    with pytest.raises(CustomerServiceUnavailableError):
        await directory.get_status(CustomerId(uuid4()))


async def test_transport_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(CustomerServiceUnavailableError):
        await _directory(handler).get_status(CustomerId(uuid4()))


@pytest.mark.parametrize("body", [
    {"data": {"status": "zombie"}},
    {"data": None},
    {},
])
async def test_malformed_body(body):
    directory = _directory(lambda r: httpx.Response(200, json=body))
    with pytest.raises(CustomerServiceUnavailableError):
        await directory.get_status(CustomerId(uuid4()))
