"""Nutritionix v2 API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

NUTRITIONIX_BASE_URL = "https://trackapi.nutritionix.com/v2"


class NutritionixClient(Protocol):
    """Interface for Nutritionix API interactions."""

    @property
    def configured(self) -> bool:
        """Whether requests can be authenticated."""
        return True

    async def search_instant(self, query: str) -> dict[str, object]:
        """Run an instant search and return raw API data."""

    async def get_item(self, nix_item_id: str) -> dict[str, object]:
        """Fetch a branded item by Nutritionix id and return raw API data."""

    async def natural_nutrients(self, query: str) -> dict[str, object]:
        """Estimate nutrients for a natural-language query."""


@dataclass
class HttpxNutritionixClient(NutritionixClient):
    """HTTPX-backed Nutritionix client."""

    app_id: str
    app_key: str
    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, app_id: str, app_key: str, base_url: str = NUTRITIONIX_BASE_URL
    ) -> "HttpxNutritionixClient":
        """Create a Nutritionix client with a managed httpx session."""
        return cls(
            app_id=app_id,
            app_key=app_key,
            base_url=base_url,
            http_client=httpx.AsyncClient(),
        )

    @property
    def configured(self) -> bool:
        """Whether both the app id and app key are set."""
        return bool(self.app_id and self.app_key)

    def _headers(self) -> dict[str, str]:
        return {"x-app-id": self.app_id, "x-app-key": self.app_key}

    async def search_instant(self, query: str) -> dict[str, object]:
        """Search common and branded foods."""
        response = await self.http_client.post(
            f"{self.base_url}/search/instant",
            headers=self._headers(),
            json={"query": query},
            timeout=15,
        )
        response.raise_for_status()
        return response.json()

    async def get_item(self, nix_item_id: str) -> dict[str, object]:
        """Fetch branded item details."""
        response = await self.http_client.get(
            f"{self.base_url}/search/item",
            headers=self._headers(),
            params={"nix_item_id": nix_item_id},
            timeout=15,
        )
        response.raise_for_status()
        return response.json()

    async def natural_nutrients(self, query: str) -> dict[str, object]:
        """Estimate nutrients for free text."""
        response = await self.http_client.post(
            f"{self.base_url}/natural/nutrients",
            headers=self._headers(),
            json={"query": query},
            timeout=15,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
