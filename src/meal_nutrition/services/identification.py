"""Meal identification using an LLM."""

import logging
from dataclasses import dataclass

from openai import OpenAIError
from pydantic import ValidationError

from meal_nutrition.adapters.openai_meal_client import MealModelClient
from meal_nutrition.domain.identification import IdentificationExtract, IdentifiedFood
from meal_nutrition.domain.nutrition import CandidateItem
from meal_nutrition.services.structured_output import decode_object

_logger = logging.getLogger(__name__)

IDENTIFICATION_INSTRUCTIONS = """\
You are a nutrition analyst. Identify all edible items and portion sizes from \
the given text and image.
Return STRICT JSON only:
{
  "foods": [{"name": "string", "portion_text": "e.g. 150 g or 1 cup"}],
  "summary": "short summary"
}
Do not calculate calories or macros. No commentary. JSON only."""

IMAGE_HINT = "Analyze the attached image as part of the meal."

IDENTIFICATION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "foods": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "portion_text": {"anyOf": [{"type": "string"}, {"type": "null"}]},
                },
                "required": ["name", "portion_text"],
                "additionalProperties": False,
            },
        },
        "summary": {"type": "string"},
    },
    "required": ["foods", "summary"],
    "additionalProperties": False,
}


@dataclass
class IdentificationService:
    """Turns a meal description and optional photo into candidate items."""

    client: MealModelClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def identify(
        self, description: str, photo_url: str | None = None
    ) -> list[CandidateItem]:
        """Return identified food items, or an empty list on failure."""
        text = description.strip() or "(no description)"
        if photo_url:
            text = f"{text}\n\n{IMAGE_HINT}"
        try:
            output = await self.client.generate(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                instructions=IDENTIFICATION_INSTRUCTIONS,
                text=text,
                image_url=photo_url,
                schema=IDENTIFICATION_SCHEMA,
                schema_name="meal_identification",
            )
        except OpenAIError as exc:
            _logger.warning("Meal identification failed: %s", exc)
            return []
        return parse_identified_items(output)


def parse_identified_items(output: str | None) -> list[CandidateItem]:
    """Decode identification output into candidate items.

    Entries without a usable name are skipped.
    """
    try:
        extract = IdentificationExtract.model_validate(decode_object(output))
    except ValidationError:
        return []
    items: list[CandidateItem] = []
    for raw in extract.foods:
        try:
            food = IdentifiedFood.model_validate(raw)
        except ValidationError:
            continue
        items.append(CandidateItem(name=food.name, portion_text=food.portion_text))
    return items
