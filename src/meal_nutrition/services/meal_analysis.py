"""Meal analysis pipeline: identify, resolve, gate, estimate, clamp, cache."""

import asyncio
import logging
from dataclasses import dataclass, field

from meal_nutrition.domain.nutrition import (
    CandidateItem,
    GateThresholds,
    NutrientProfile,
    ResolvedNutrients,
)
from meal_nutrition.services.aggregation import (
    aggregate_resolutions,
    clamp_profile,
    merge_profile,
    passes_gate,
)
from meal_nutrition.services.cache import ProfileCache, request_fingerprint
from meal_nutrition.services.estimation import MicronutrientEstimator
from meal_nutrition.services.identification import IdentificationService
from meal_nutrition.services.normalization import canonicalize, dedupe_items
from meal_nutrition.services.nutrition import NutrientResolver
from meal_nutrition.services.portions import portion_multiplier

_logger = logging.getLogger(__name__)

FALLBACK_ITEM_NAME = "meal"


@dataclass
class MealAnalysisService:
    """Produces a clamped nutrient profile for a meal description."""

    identification_service: IdentificationService
    resolver: NutrientResolver
    estimator: MicronutrientEstimator
    cache: ProfileCache
    thresholds: GateThresholds = field(default_factory=GateThresholds)

    async def analyze(
        self,
        description: str,
        photo_url: str | None = None,
        *,
        force_micros: bool = False,
    ) -> NutrientProfile:
        """Analyze a meal, serving repeated requests from the cache."""
        cache_key = request_fingerprint(
            description, photo_url, force_micros=force_micros
        )
        cached = self.cache.get(cache_key)
        if cached is not None:
            _logger.info("Meal analysis cache hit")
            return cached

        identified = await self.identification_service.identify(description, photo_url)
        items = dedupe_items(identified) or [
            CandidateItem(name=description.strip() or FALLBACK_ITEM_NAME)
        ]
        profile = await self.profile_items(items, force_micros=force_micros)
        self.cache.set(cache_key, profile)
        return profile

    async def profile_items(
        self, items: list[CandidateItem], *, force_micros: bool = False
    ) -> NutrientProfile:
        """Resolve, gate and merge nutrients for already identified items."""
        resolved = await asyncio.gather(*(self._resolve_item(item) for item in items))
        aggregate, coverage = aggregate_resolutions(
            zip(resolved, (portion_multiplier(item.portion_text) for item in items))
        )

        if not force_micros and passes_gate(aggregate, coverage, self.thresholds):
            _logger.info(
                "Verified data passed the gate (%s/%s branded); skipping estimation",
                coverage.branded_hits,
                coverage.total_items,
            )
            return clamp_profile(merge_profile(aggregate))

        _logger.info(
            "Estimating micronutrients (%s/%s branded, force=%s)",
            coverage.branded_hits,
            coverage.total_items,
            force_micros,
        )
        food_list = [_food_label(item) for item in items]
        estimate = await self.estimator.estimate(aggregate, food_list)
        return clamp_profile(merge_profile(aggregate, estimate))

    async def _resolve_item(self, item: CandidateItem) -> ResolvedNutrients:
        item_text = canonicalize(item.name)
        if not item_text:
            return ResolvedNutrients.unresolved()
        result = await self.resolver.resolve(item_text)
        return result.value or ResolvedNutrients.unresolved()


def _food_label(item: CandidateItem) -> str:
    """Return the portion-prefixed canonical name used in the estimation prompt."""
    name = canonicalize(item.name) or item.name
    return CandidateItem(name=name, portion_text=item.portion_text).prompt_label()
