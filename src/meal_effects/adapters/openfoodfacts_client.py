"""Open Food Facts product API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

_USER_AGENT = "meal-effects/0.1 (+https://world.openfoodfacts.org)"


class OpenFoodFactsClient(Protocol):
    """Interface for Open Food Facts product lookups."""

    async def get_product(self, code: str) -> dict[str, object]:
        """Fetch a product by barcode and return raw API data."""


@dataclass
class HttpxOpenFoodFactsClient(OpenFoodFactsClient):
    """HTTPX-backed Open Food Facts client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 3.0

    @classmethod
    def create(
        cls, base_url: str, timeout_seconds: float = 3.0
    ) -> "HttpxOpenFoodFactsClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url,
            http_client=httpx.AsyncClient(headers={"User-Agent": _USER_AGENT}),
            timeout_seconds=timeout_seconds,
        )

    async def get_product(self, code: str) -> dict[str, object]:
        """Fetch a product by barcode.

        Open Food Facts answers unknown barcodes with HTTP 200 and
        ``status: 0``; callers inspect the payload.
        """
        url = f"{self.base_url}/api/v0/product/{code}.json"
        response = await self.http_client.get(url, timeout=self.timeout_seconds)
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
