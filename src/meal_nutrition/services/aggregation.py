"""Aggregation of verified macros, the plausibility gate, merge and clamp."""

from collections.abc import Iterable, Mapping

from meal_nutrition.domain.nutrition import (
    CLAMP_RANGES,
    MACRO_FIELDS,
    MICRO_FIELDS,
    RESPONSE_KEYS,
    CoverageState,
    GateThresholds,
    NutrientProfile,
    NutrientSource,
    ResolvedNutrients,
    VerifiedAggregate,
    safe_int,
)

# Alternative keys models use for the same nutrient.
_ESTIMATE_ALIASES = {"carbs": ("carbohydrates",)}


def aggregate_resolutions(
    resolutions: Iterable[tuple[ResolvedNutrients | None, float]],
) -> tuple[VerifiedAggregate, CoverageState]:
    """Sum portion-scaled macros and count branded matches.

    Each element pairs an item's resolved nutrients with its portion
    multiplier. Unresolved items (None or an unresolved record) count toward
    the total but contribute nothing.
    """
    aggregate = VerifiedAggregate()
    branded_hits = 0
    total_items = 0
    for nutrients, multiplier in resolutions:
        total_items += 1
        if nutrients is None or nutrients.source is NutrientSource.NONE:
            continue
        aggregate.add(nutrients.scaled(multiplier))
        if nutrients.is_branded:
            branded_hits += 1
    return aggregate, CoverageState(branded_hits=branded_hits, total_items=total_items)


def _within(value: int, bounds: tuple[int, int]) -> bool:
    low, high = bounds
    return low <= value <= high


def passes_gate(
    aggregate: VerifiedAggregate,
    coverage: CoverageState,
    thresholds: GateThresholds | None = None,
) -> bool:
    """Whether verified data is trustworthy enough to skip estimation."""
    limits = thresholds or GateThresholds()
    return (
        coverage.branded_coverage >= limits.min_branded_coverage
        and _within(aggregate.calories, limits.calories)
        and _within(aggregate.protein, limits.protein)
        and _within(aggregate.carbs, limits.carbs)
        and _within(aggregate.fat, limits.fat)
    )


def _estimate_value(estimate: Mapping[str, object], name: str) -> int:
    value = estimate.get(name)
    if value is None:
        value = estimate.get(RESPONSE_KEYS[name])
    for alias in _ESTIMATE_ALIASES.get(name, ()):
        if value is not None:
            break
        value = estimate.get(alias)
    return safe_int(value)


def merge_profile(
    aggregate: VerifiedAggregate, estimate: Mapping[str, object] | None = None
) -> NutrientProfile:
    """Combine verified macros with estimated values; verified wins."""
    estimate = estimate or {}
    values: dict[str, int] = {}
    for name in MACRO_FIELDS:
        verified = getattr(aggregate, name)
        values[name] = verified if verified else _estimate_value(estimate, name)
    for name in MICRO_FIELDS:
        values[name] = _estimate_value(estimate, name)
    return NutrientProfile(**values)


def clamp_profile(profile: NutrientProfile) -> NutrientProfile:
    """Clamp macros to single-meal ranges and floor micronutrients at 0."""
    values: dict[str, int] = {}
    for name, (low, high) in CLAMP_RANGES.items():
        values[name] = min(max(getattr(profile, name), low), high)
    for name in MICRO_FIELDS:
        values[name] = max(0, getattr(profile, name))
    return NutrientProfile(**values)
