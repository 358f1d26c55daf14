"""Model-based micronutrient estimation used when verified data falls short."""

import json
import logging
from dataclasses import dataclass

from openai import OpenAIError

from meal_nutrition.adapters.openai_meal_client import MealModelClient
from meal_nutrition.domain.nutrition import RESPONSE_KEYS, VerifiedAggregate
from meal_nutrition.services.structured_output import decode_object

_logger = logging.getLogger(__name__)

ESTIMATION_INSTRUCTIONS = """\
You are an expert dietitian.
You are given verified macronutrient totals for a single meal from nutrition \
databases. Your job is to FILL IN MICRONUTRIENTS ONLY and keep macros \
realistic. Do not overwrite verified macros; treat them as fixed.
If the verified totals are all zero, estimate the macros from the food list.
If any macros look extreme, normalize to these single-meal ranges:
- Calories: 300-1100 kcal
- Protein: 5-60 g
- Carbs: 5-150 g
- Fat: 5-60 g
- Sodium: 100-1500 mg
- Fiber: 0-15 g

Return ONE JSON object with integer values for:
protein (g), calories (kcal), carbs (g), fat (g),
vitaminA (µg), vitaminC (mg), vitaminD (µg), vitaminE (mg), vitaminK (µg), \
vitaminB12 (µg),
iron (mg), calcium (mg), magnesium (mg), zinc (mg),
water (ml), sodium (mg), potassium (mg), chloride (mg), fiber (g).
If unknown, use 0. Respond with JSON only."""

ESTIMATION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {key: {"type": "integer"} for key in RESPONSE_KEYS.values()},
    "required": list(RESPONSE_KEYS.values()),
    "additionalProperties": False,
}


@dataclass
class MicronutrientEstimator:
    """Requests a best-effort full nutrient estimate from the model."""

    client: MealModelClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def estimate(
        self, aggregate: VerifiedAggregate, food_list: list[str]
    ) -> dict[str, object]:
        """Return estimated nutrients, or an empty dict on failure."""
        try:
            output = await self.client.generate(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                instructions=ESTIMATION_INSTRUCTIONS,
                text=build_estimation_input(aggregate, food_list),
                schema=ESTIMATION_SCHEMA,
                schema_name="meal_estimate",
            )
        except OpenAIError as exc:
            _logger.warning("Micronutrient estimation failed: %s", exc)
            return {}
        return decode_object(output)


def build_estimation_input(aggregate: VerifiedAggregate, food_list: list[str]) -> str:
    """Render the verified totals and food list for the estimation prompt."""
    totals = json.dumps(aggregate.as_dict())
    foods = json.dumps(food_list)
    if aggregate.is_empty:
        note = "No database matched these foods; estimate macros as well."
    else:
        note = "Verified totals (MACROS ONLY, keep dominant)."
    return f"{note}\n{totals}\n\nFoods:\n{foods}"
