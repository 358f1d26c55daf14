"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from meal_nutrition.adapters.nutritionix_client import HttpxNutritionixClient
from meal_nutrition.adapters.openai_meal_client import OpenAIMealClient
from meal_nutrition.adapters.openfoodfacts_client import HttpxOpenFoodFactsClient
from meal_nutrition.config import Settings
from meal_nutrition.services.cache import ResultCache
from meal_nutrition.services.estimation import MicronutrientEstimator
from meal_nutrition.services.identification import IdentificationService
from meal_nutrition.services.meal_analysis import MealAnalysisService
from meal_nutrition.services.nutrition import NutrientResolver


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    meal_analysis_service: MealAnalysisService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    nutritionix_client = HttpxNutritionixClient.create(
        app_id=resolved_settings.nutritionix_app_id,
        app_key=resolved_settings.nutritionix_app_key,
        base_url=resolved_settings.nutritionix_base_url,
    )
    openfoodfacts_client = HttpxOpenFoodFactsClient.create(
        base_url=resolved_settings.openfoodfacts_base_url
    )
    # A missing key is reported per request by the API layer.
    openai_client = OpenAIMealClient.create(resolved_settings.openai_api_key or "")
    identification_service = IdentificationService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    estimator = MicronutrientEstimator(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    resolver = NutrientResolver(
        nutritionix_client=nutritionix_client,
        openfoodfacts_client=openfoodfacts_client,
        retry_attempts=resolved_settings.lookup_retry_attempts,
    )
    meal_analysis_service = MealAnalysisService(
        identification_service=identification_service,
        resolver=resolver,
        estimator=estimator,
        cache=ResultCache(
            ttl_seconds=resolved_settings.result_cache_ttl_seconds,
            max_entries=resolved_settings.result_cache_max_entries,
        ),
    )

    async def close_resources() -> None:
        await nutritionix_client.close()
        await openfoodfacts_client.close()
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        meal_analysis_service=meal_analysis_service,
        close_resources=close_resources,
    )
