"""Open Food Facts search client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

OPENFOODFACTS_BASE_URL = "https://world.openfoodfacts.org"


class OpenFoodFactsClient(Protocol):
    """Interface for Open Food Facts product search."""

    async def search_products(
        self, query: str, page_size: int = 1
    ) -> dict[str, object]:
        """Search products by terms and return raw API data."""


@dataclass
class HttpxOpenFoodFactsClient(OpenFoodFactsClient):
    """HTTPX-backed Open Food Facts client."""

    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, base_url: str = OPENFOODFACTS_BASE_URL
    ) -> "HttpxOpenFoodFactsClient":
        """Create a client with a managed httpx session."""
        return cls(base_url=base_url, http_client=httpx.AsyncClient())

    async def search_products(
        self, query: str, page_size: int = 1
    ) -> dict[str, object]:
        """Run a simple product search."""
        response = await self.http_client.get(
            f"{self.base_url}/cgi/search.pl",
            params={
                "search_terms": query,
                "search_simple": 1,
                "json": 1,
                "page_size": page_size,
            },
            timeout=15,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
