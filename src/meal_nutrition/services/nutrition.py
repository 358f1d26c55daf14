"""Nutrient source resolution across Nutritionix and Open Food Facts."""

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx

from meal_nutrition.adapters.nutritionix_client import NutritionixClient
from meal_nutrition.adapters.openfoodfacts_client import OpenFoodFactsClient
from meal_nutrition.domain.nutrition import NutrientSource, ResolvedNutrients, safe_int
from meal_nutrition.domain.results import FetchResult
from meal_nutrition.services.normalization import similarity

_logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


@dataclass
class NutrientResolver:
    """Resolves verified macros for one item, branded tier first."""

    nutritionix_client: NutritionixClient
    openfoodfacts_client: OpenFoodFactsClient
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def resolve(self, item_text: str) -> FetchResult[ResolvedNutrients]:
        """Return the first usable nutrient record for the item text."""
        branded = await self.resolve_branded(item_text)
        if branded.ok:
            _logger.info("Resolved %r from %s", item_text, branded.value.source)
            return branded
        generic = await self.resolve_generic(item_text)
        if generic.ok:
            _logger.info("Resolved %r from %s", item_text, generic.value.source)
            return generic
        _logger.info(
            "No nutrient source for %r: branded=%s generic=%s",
            item_text,
            branded.error.message if branded.error else "n/a",
            generic.error.message if generic.error else "n/a",
        )
        return generic

    async def resolve_branded(self, item_text: str) -> FetchResult[ResolvedNutrients]:
        """Match the best branded candidate and fetch its nutrient detail."""
        search = await self._fetch_nutritionix(
            lambda: self.nutritionix_client.search_instant(item_text),
            source="nutritionix:instant",
        )
        if not search.ok:
            return FetchResult(error=search.error)
        candidates = [
            candidate
            for candidate in _as_list(search.value.get("branded"))
            if isinstance(candidate, dict)
        ]
        if not candidates:
            return FetchResult.failure("nutritionix:instant", "no branded candidates")

        best = max(
            candidates, key=lambda candidate: _branded_score(item_text, candidate)
        )
        nix_item_id = best.get("nix_item_id")
        if not nix_item_id:
            return FetchResult.failure(
                "nutritionix:instant", "best candidate has no nix_item_id"
            )

        detail = await self._fetch_nutritionix(
            lambda: self.nutritionix_client.get_item(str(nix_item_id)),
            source="nutritionix:item",
        )
        if not detail.ok:
            return FetchResult(error=detail.error)
        item = _first_dict(detail.value.get("foods"))
        if item is None:
            return FetchResult.failure("nutritionix:item", "no item in detail")
        return FetchResult.success(
            _from_nutritionix(item, NutrientSource.NUTRITIONIX_BRANDED)
        )

    async def resolve_generic(self, item_text: str) -> FetchResult[ResolvedNutrients]:
        """Query natural-language and Open Food Facts lookups concurrently."""
        natural, open_food_facts = await asyncio.gather(
            self._resolve_natural(item_text),
            self._resolve_open_food_facts(item_text),
        )
        if natural.ok:
            return natural
        if open_food_facts.ok:
            return open_food_facts
        reasons = "; ".join(
            f"{result.error.source}: {result.error.message}"
            for result in (natural, open_food_facts)
            if result.error
        )
        return FetchResult.failure("generic", reasons or "no generic match")

    async def _resolve_natural(self, item_text: str) -> FetchResult[ResolvedNutrients]:
        fetched = await self._fetch_nutritionix(
            lambda: self.nutritionix_client.natural_nutrients(item_text),
            source="nutritionix:natural",
        )
        if not fetched.ok:
            return FetchResult(error=fetched.error)
        item = _first_dict(fetched.value.get("foods"))
        if item is None:
            return FetchResult.failure("nutritionix:natural", "no foods returned")
        return FetchResult.success(
            _from_nutritionix(item, NutrientSource.NUTRITIONIX_NATURAL)
        )

    async def _resolve_open_food_facts(
        self, item_text: str
    ) -> FetchResult[ResolvedNutrients]:
        fetched = await self._fetch(
            lambda: self.openfoodfacts_client.search_products(item_text, page_size=1),
            source="openfoodfacts:search",
        )
        if not fetched.ok:
            return FetchResult(error=fetched.error)
        product = _first_dict(fetched.value.get("products"))
        nutriments = product.get("nutriments") if product else None
        if not isinstance(nutriments, dict) or not nutriments:
            return FetchResult.failure("openfoodfacts:search", "no product nutriments")
        return FetchResult.success(_from_open_food_facts(nutriments))

    async def _fetch_nutritionix(
        self, func: "Callable[[], Awaitable[dict[str, object]]]", *, source: str
    ) -> FetchResult[dict[str, object]]:
        if not self.nutritionix_client.configured:
            return FetchResult.failure(source, "credentials not configured")
        return await self._fetch(func, source=source)

    async def _fetch(
        self, func: "Callable[[], Awaitable[dict[str, object]]]", *, source: str
    ) -> FetchResult[dict[str, object]]:
        """Call an upstream lookup with a short retry, capturing failures."""
        attempt = 0
        while True:
            try:
                payload = await func()
            except (httpx.HTTPError, ValueError) as exc:
                attempt += 1
                status_code = _status_code_from_exception(exc)
                _logger.debug(
                    "Lookup %s failed (attempt %s/%s, status=%s): %s",
                    source,
                    attempt,
                    self.retry_attempts + 1,
                    status_code,
                    exc,
                )
                if attempt > self.retry_attempts or _is_client_error(status_code):
                    return FetchResult.failure(
                        source, str(exc) or type(exc).__name__, status_code
                    )
                await asyncio.sleep(self.retry_delay_seconds)
                continue
            if not isinstance(payload, dict):
                return FetchResult.failure(source, "unexpected payload shape")
            return FetchResult.success(payload)


def _status_code_from_exception(exc: Exception) -> int | None:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return status_code
    return None


def _is_client_error(status_code: int | None) -> bool:
    """4xx answers other than rate limiting will not change on retry."""
    return status_code is not None and 400 <= status_code < 500 and status_code != 429


def _branded_score(item_text: str, candidate: dict[str, object]) -> float:
    label = f"{candidate.get('brand_name') or ''} {candidate.get('food_name') or ''}"
    return similarity(item_text, label)


def _as_list(value: object) -> list[object]:
    return value if isinstance(value, list) else []


def _first_dict(value: object) -> dict[str, object] | None:
    items = _as_list(value)
    if items and isinstance(items[0], dict):
        return items[0]
    return None


def _amount(value: object) -> int:
    return max(0, safe_int(value))


def _grams_to_mg(value: object) -> int:
    try:
        return _amount(float(value) * 1000)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0


def _from_nutritionix(
    item: dict[str, object], source: NutrientSource
) -> ResolvedNutrients:
    """Extract macros from a Nutritionix food record."""
    return ResolvedNutrients(
        source=source,
        calories=_amount(item.get("nf_calories")),
        protein=_amount(item.get("nf_protein")),
        carbs=_amount(item.get("nf_total_carbohydrate")),
        fat=_amount(item.get("nf_total_fat")),
        sodium=_amount(item.get("nf_sodium")),
        fiber=_amount(item.get("nf_dietary_fiber")),
    )


def _from_open_food_facts(nutriments: dict[str, object]) -> ResolvedNutrients:
    """Extract per-100 g macros from Open Food Facts nutriments."""
    return ResolvedNutrients(
        source=NutrientSource.OPEN_FOOD_FACTS,
        calories=_amount(nutriments.get("energy-kcal_100g")),
        protein=_amount(nutriments.get("proteins_100g")),
        carbs=_amount(nutriments.get("carbohydrates_100g")),
        fat=_amount(nutriments.get("fat_100g")),
        # Reported in grams.
        sodium=_grams_to_mg(nutriments.get("sodium_100g")),
        fiber=_amount(nutriments.get("fiber_100g")),
    )
