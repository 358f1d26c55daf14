"""Pydantic models for the nutrition API payloads."""

from pydantic import BaseModel, Field


class MealAnalysisRequest(BaseModel):
    """Meal description and optional photo submitted for analysis."""

    description: str | None = None
    photo_url: str | None = Field(default=None, alias="photoUrl")


class NutrientProfileResponse(BaseModel):
    """Flat per-meal nutrient profile; every field is always present."""

    protein: int = 0
    calories: int = 0
    carbs: int = 0
    fat: int = 0
    vitaminA: int = 0  # noqa: N815
    vitaminC: int = 0  # noqa: N815
    vitaminD: int = 0  # noqa: N815
    vitaminE: int = 0  # noqa: N815
    vitaminK: int = 0  # noqa: N815
    vitaminB12: int = 0  # noqa: N815
    iron: int = 0
    calcium: int = 0
    magnesium: int = 0
    zinc: int = 0
    water: int = 0
    sodium: int = 0
    potassium: int = 0
    chloride: int = 0
    fiber: int = 0
