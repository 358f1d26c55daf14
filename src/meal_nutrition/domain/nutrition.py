"""Nutrition domain models."""

import math
from dataclasses import dataclass
from enum import StrEnum

MACRO_FIELDS = ("calories", "protein", "carbs", "fat", "fiber", "sodium")
MICRO_FIELDS = (
    "vitamin_a",
    "vitamin_c",
    "vitamin_d",
    "vitamin_e",
    "vitamin_k",
    "vitamin_b12",
    "iron",
    "calcium",
    "magnesium",
    "zinc",
    "water",
    "potassium",
    "chloride",
)

# Response keys in the order callers expect them.
RESPONSE_KEYS = {
    "protein": "protein",
    "calories": "calories",
    "carbs": "carbs",
    "fat": "fat",
    "vitamin_a": "vitaminA",
    "vitamin_c": "vitaminC",
    "vitamin_d": "vitaminD",
    "vitamin_e": "vitaminE",
    "vitamin_k": "vitaminK",
    "vitamin_b12": "vitaminB12",
    "iron": "iron",
    "calcium": "calcium",
    "magnesium": "magnesium",
    "zinc": "zinc",
    "water": "water",
    "sodium": "sodium",
    "potassium": "potassium",
    "chloride": "chloride",
    "fiber": "fiber",
}


def safe_int(value: object) -> int:
    """Convert a loosely typed number to an int, rounding half up.

    Missing, non-numeric and non-finite values become 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    return math.floor(number + 0.5)


class NutrientSource(StrEnum):
    """Provenance of a resolved nutrient record."""

    NUTRITIONIX_BRANDED = "Nutritionix Branded"
    NUTRITIONIX_NATURAL = "Nutritionix Natural"
    OPEN_FOOD_FACTS = "OpenFoodFacts"
    NONE = "none"


@dataclass(frozen=True)
class CandidateItem:
    """Food item identified in a meal description."""

    name: str
    portion_text: str | None = None

    def prompt_label(self) -> str:
        """Return the portion-prefixed label used in model prompts."""
        return f"{self.portion_text or ''} {self.name}".strip()


@dataclass(frozen=True)
class ResolvedNutrients:
    """Macros for one item as reported by a nutrition source."""

    source: NutrientSource
    calories: int = 0
    protein: int = 0
    carbs: int = 0
    fat: int = 0
    fiber: int = 0
    sodium: int = 0

    @classmethod
    def unresolved(cls) -> "ResolvedNutrients":
        """Return the zero record used for items no source matched."""
        return cls(source=NutrientSource.NONE)

    @property
    def is_branded(self) -> bool:
        """Whether the record came from the branded tier."""
        return self.source is NutrientSource.NUTRITIONIX_BRANDED

    def scaled(self, multiplier: float) -> "ResolvedNutrients":
        """Scale every macro by a portion multiplier, rounding after scaling."""
        return ResolvedNutrients(
            source=self.source,
            **{
                name: safe_int(getattr(self, name) * multiplier)
                for name in MACRO_FIELDS
            },
        )


@dataclass
class VerifiedAggregate:
    """Running sum of database-verified macros for a meal."""

    calories: int = 0
    protein: int = 0
    carbs: int = 0
    fat: int = 0
    fiber: int = 0
    sodium: int = 0

    def add(self, nutrients: ResolvedNutrients) -> None:
        """Add one item's (already scaled) macros to the totals."""
        for name in MACRO_FIELDS:
            setattr(self, name, getattr(self, name) + getattr(nutrients, name))

    @property
    def is_empty(self) -> bool:
        """Whether no source contributed any macro."""
        return all(getattr(self, name) == 0 for name in MACRO_FIELDS)

    def as_dict(self) -> dict[str, int]:
        """Return the totals keyed by macro name."""
        return {name: getattr(self, name) for name in MACRO_FIELDS}


@dataclass(frozen=True)
class CoverageState:
    """How many items were matched by the branded tier."""

    branded_hits: int
    total_items: int

    @property
    def branded_coverage(self) -> float:
        """Fraction of items resolved from branded data."""
        return self.branded_hits / max(1, self.total_items)


@dataclass(frozen=True)
class NutrientProfile:
    """Final per-meal nutrient profile returned to callers."""

    calories: int = 0
    protein: int = 0
    carbs: int = 0
    fat: int = 0
    fiber: int = 0
    sodium: int = 0
    vitamin_a: int = 0
    vitamin_c: int = 0
    vitamin_d: int = 0
    vitamin_e: int = 0
    vitamin_k: int = 0
    vitamin_b12: int = 0
    iron: int = 0
    calcium: int = 0
    magnesium: int = 0
    zinc: int = 0
    water: int = 0
    potassium: int = 0
    chloride: int = 0

    def as_response(self) -> dict[str, int]:
        """Return the flat camelCase payload sent to callers."""
        return {key: getattr(self, name) for name, key in RESPONSE_KEYS.items()}


@dataclass(frozen=True)
class GateThresholds:
    """Bounds deciding whether verified macros can skip estimation."""

    min_branded_coverage: float = 0.5
    calories: tuple[int, int] = (200, 1200)
    protein: tuple[int, int] = (5, 60)
    carbs: tuple[int, int] = (5, 160)
    fat: tuple[int, int] = (5, 70)


# Plausible single-meal ranges applied to every response.
CLAMP_RANGES: dict[str, tuple[int, int]] = {
    "calories": (100, 1100),
    "protein": (5, 60),
    "carbs": (5, 150),
    "fat": (5, 60),
    "sodium": (0, 2000),
    "fiber": (0, 20),
}
