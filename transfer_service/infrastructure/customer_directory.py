"""HTTP Customer Directory — CustomerDirectory over the customer service REST API.

Invariants:
    - 404 → None (unknown customer); 2xx → CustomerStatus from body["data"]["status"]
    - Transport errors, timeouts, 5xx, and unparseable bodies →
      CustomerServiceUnavailableError
    - Status tokens are matched case-insensitively ("Active" == "active")

Design Decisions:
    - httpx.AsyncClient is injected: lifespan owns it, tests pass a MockTransport
"""

import logging

import httpx

from transfer_service.core.domain_types import CustomerId, CustomerStatus
from transfer_service.core.errors import CustomerServiceUnavailableError

logger = logging.getLogger(__name__)


class HttpCustomerDirectory:

    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    async def get_status(self, customer_id: CustomerId) -> CustomerStatus | None:
        try:
            response = await self._client.get(f"/api/customers/{customer_id}")
        except httpx.HTTPError as e:
            logger.error(f"Customer service request failed: {e}")
            raise CustomerServiceUnavailableError(
                "Customer service is unavailable.",
            ) from e

        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        if response.is_error:
            logger.error(
                f"Customer service returned {response.status_code}",
                extra={"error_code": "CUSTOMER_SERVICE_UNAVAILABLE"},
            )
            raise CustomerServiceUnavailableError(
                f"Customer service returned {response.status_code}.",
            )

        try:
            data = response.json().get("data") or {}
            return CustomerStatus(str(data["status"]).lower())
        except (ValueError, KeyError, AttributeError) as e:
            logger.error(f"Unparseable customer service response: {e}")
            raise CustomerServiceUnavailableError(
                "Customer service returned an invalid response.",
            ) from e


def build_customer_client(base_url: str, timeout_seconds: float) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=base_url, timeout=timeout_seconds)
