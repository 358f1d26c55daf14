"""Shared test fixtures."""

import json
from dataclasses import dataclass, field

import httpx
import pytest

from meal_nutrition.adapters.nutritionix_client import NutritionixClient
from meal_nutrition.adapters.openai_meal_client import MealModelClient
from meal_nutrition.adapters.openfoodfacts_client import OpenFoodFactsClient
from meal_nutrition.config import Settings
from meal_nutrition.containers import AppContainer
from meal_nutrition.services.cache import ResultCache
from meal_nutrition.services.estimation import (
    ESTIMATION_INSTRUCTIONS,
    MicronutrientEstimator,
)
from meal_nutrition.services.identification import IdentificationService
from meal_nutrition.services.meal_analysis import MealAnalysisService
from meal_nutrition.services.nutrition import NutrientResolver


def http_error(status_code: int = 404) -> httpx.HTTPStatusError:
    """Build the error raise_for_status() produces for a failed lookup."""
    request = httpx.Request("GET", "https://lookup.test")
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError(
        f"status {status_code}", request=request, response=response
    )


def nutritionix_food(  # noqa: PLR0913
    calories: float,
    protein: float = 0,
    carbs: float = 0,
    fat: float = 0,
    sodium: float = 0,
    fiber: float = 0,
) -> dict[str, object]:
    """Return a Nutritionix foods payload with a single item."""
    return {
        "foods": [
            {
                "nf_calories": calories,
                "nf_protein": protein,
                "nf_total_carbohydrate": carbs,
                "nf_total_fat": fat,
                "nf_sodium": sodium,
                "nf_dietary_fiber": fiber,
            }
        ]
    }


@dataclass
class FakeNutritionixClient(NutritionixClient):
    """Fake Nutritionix client answering from per-query payloads.

    Queries without a configured payload fail like a 404 would.
    """

    instant: dict[str, dict[str, object]] = field(default_factory=dict)
    items: dict[str, dict[str, object]] = field(default_factory=dict)
    natural: dict[str, dict[str, object]] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)

    async def search_instant(self, query: str) -> dict[str, object]:
        self.calls.append(("instant", query))
        if query not in self.instant:
            raise http_error()
        return self.instant[query]

    async def get_item(self, nix_item_id: str) -> dict[str, object]:
        self.calls.append(("item", nix_item_id))
        if nix_item_id not in self.items:
            raise http_error()
        return self.items[nix_item_id]

    async def natural_nutrients(self, query: str) -> dict[str, object]:
        self.calls.append(("natural", query))
        if query not in self.natural:
            raise http_error()
        return self.natural[query]


@dataclass
class FakeOpenFoodFactsClient(OpenFoodFactsClient):
    """Fake Open Food Facts client answering from per-query payloads."""

    products: dict[str, dict[str, object]] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    async def search_products(
        self, query: str, page_size: int = 1
    ) -> dict[str, object]:
        self.calls.append(query)
        if query not in self.products:
            raise http_error(503)
        return self.products[query]


@dataclass
class FakeMealModelClient(MealModelClient):
    """Fake model client returning canned identification/estimation text."""

    foods: list[dict[str, object]] = field(default_factory=list)
    estimate: dict[str, object] = field(default_factory=dict)
    identification_text: str | None = None
    identification_calls: list[dict[str, object]] = field(default_factory=list)
    estimation_calls: list[dict[str, object]] = field(default_factory=list)

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        text: str,
        image_url: str | None = None,
        schema: dict[str, object] | None = None,
        schema_name: str = "meal_output",
    ) -> str:
        call = {
            "model": model,
            "text": text,
            "image_url": image_url,
            "schema_name": schema_name,
        }
        if instructions == ESTIMATION_INSTRUCTIONS:
            self.estimation_calls.append(call)
            return "```json\n" + json.dumps(self.estimate) + "\n```"
        self.identification_calls.append(call)
        if self.identification_text is not None:
            return self.identification_text
        return json.dumps({"foods": self.foods, "summary": "test meal"})


@pytest.fixture
def settings() -> Settings:
    return Settings(
        openai_api_key="openai-key",
        nutritionix_app_id="nix-app",
        nutritionix_app_key="nix-key",
    )


@pytest.fixture
def nutritionix_client() -> FakeNutritionixClient:
    return FakeNutritionixClient()


@pytest.fixture
def openfoodfacts_client() -> FakeOpenFoodFactsClient:
    return FakeOpenFoodFactsClient()


@pytest.fixture
def model_client() -> FakeMealModelClient:
    return FakeMealModelClient()


@pytest.fixture
def resolver(
    nutritionix_client: FakeNutritionixClient,
    openfoodfacts_client: FakeOpenFoodFactsClient,
) -> NutrientResolver:
    return NutrientResolver(
        nutritionix_client=nutritionix_client,
        openfoodfacts_client=openfoodfacts_client,
        retry_attempts=0,
        retry_delay_seconds=0,
    )


@pytest.fixture
def meal_analysis_service(
    settings: Settings,
    model_client: FakeMealModelClient,
    resolver: NutrientResolver,
) -> MealAnalysisService:
    return MealAnalysisService(
        identification_service=IdentificationService(
            client=model_client,
            model=settings.openai_model,
            reasoning_effort=settings.openai_reasoning_effort,
            store=settings.openai_store,
        ),
        resolver=resolver,
        estimator=MicronutrientEstimator(
            client=model_client,
            model=settings.openai_model,
            reasoning_effort=settings.openai_reasoning_effort,
            store=settings.openai_store,
        ),
        cache=ResultCache(),
    )


@pytest.fixture
def container(
    settings: Settings, meal_analysis_service: MealAnalysisService
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        meal_analysis_service=meal_analysis_service,
        close_resources=close_resources,
    )
