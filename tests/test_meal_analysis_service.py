"""Tests for the meal analysis pipeline."""

import asyncio

from meal_nutrition.domain.nutrition import CLAMP_RANGES, MICRO_FIELDS, NutrientProfile
from meal_nutrition.services.meal_analysis import MealAnalysisService
from tests.conftest import (
    FakeMealModelClient,
    FakeNutritionixClient,
    FakeOpenFoodFactsClient,
    nutritionix_food,
)


def _branded(
    client: FakeNutritionixClient, query: str, item_id: str, payload: dict
) -> None:
    client.instant[query] = {
        "branded": [{"nix_item_id": item_id, "food_name": query}]
    }
    client.items[item_id] = payload


def test_branded_hit_keeps_verified_macros(
    meal_analysis_service: MealAnalysisService,
    model_client: FakeMealModelClient,
    nutritionix_client: FakeNutritionixClient,
) -> None:
    model_client.foods = [{"name": "Coca-Cola 355ml", "portion_text": ""}]
    model_client.estimate = {"calories": 300, "protein": 2, "potassium": 10}
    _branded(
        nutritionix_client,
        "coca cola 355ml",
        "coke-355",
        nutritionix_food(140, protein=0, carbs=39, fat=0, sodium=45, fiber=0),
    )

    profile = asyncio.run(meal_analysis_service.analyze("a can of coke"))

    assert profile.calories == 140
    assert profile.carbs == 39
    assert profile.sodium == 45
    assert profile.protein == 5
    assert profile.fat == 5
    assert profile.potassium == 10
    # Protein below the gate floor sends the meal to estimation.
    assert len(model_client.estimation_calls) == 1
    assert '"calories": 140' in model_client.estimation_calls[0]["text"]


def test_no_source_found_invokes_estimator(
    meal_analysis_service: MealAnalysisService,
    model_client: FakeMealModelClient,
    openfoodfacts_client: FakeOpenFoodFactsClient,
) -> None:
    model_client.foods = [{"name": "Unobtainium Snack", "portion_text": "1 bar"}]
    model_client.estimate = {
        "calories": 250,
        "protein": 10,
        "carbohydrates": 30,
        "fat": 12,
        "vitaminA": 90,
        "iron": 2,
    }

    profile = asyncio.run(meal_analysis_service.analyze("unobtainium snack bar"))

    assert openfoodfacts_client.calls == ["unobtainium snack"]
    assert len(model_client.estimation_calls) == 1
    prompt = model_client.estimation_calls[0]["text"]
    assert "estimate macros as well" in prompt
    assert "1 bar unobtainium snack" in prompt
    assert profile.calories == 250
    assert profile.carbs == 30
    assert profile.vitamin_a == 90
    assert profile.iron == 2


def test_portion_multiplier_scales_generic_match(
    meal_analysis_service: MealAnalysisService,
    model_client: FakeMealModelClient,
    nutritionix_client: FakeNutritionixClient,
) -> None:
    model_client.foods = [{"name": "burger", "portion_text": "large"}]
    nutritionix_client.natural["burger"] = nutritionix_food(
        400, protein=20, carbs=30, fat=20, sodium=700, fiber=2
    )

    profile = asyncio.run(meal_analysis_service.analyze("large burger"))

    assert profile.calories == 520
    assert profile.protein == 26
    assert profile.carbs == 39
    assert profile.fat == 26
    assert profile.sodium == 910
    assert profile.fiber == 3


def test_gate_pass_skips_estimation(
    meal_analysis_service: MealAnalysisService,
    model_client: FakeMealModelClient,
    nutritionix_client: FakeNutritionixClient,
) -> None:
    model_client.foods = [
        {"name": "Grilled Chicken Sandwich", "portion_text": "1"},
        {"name": "Apple Slices", "portion_text": None},
        {"name": "Sparkling Water", "portion_text": "medium"},
    ]
    _branded(
        nutritionix_client,
        "grilled chicken sandwich",
        "sandwich-1",
        nutritionix_food(400, protein=25, carbs=40, fat=15, sodium=900, fiber=3),
    )
    _branded(
        nutritionix_client,
        "apple slices",
        "apple-1",
        nutritionix_food(100, protein=5, carbs=20, fat=5, fiber=2),
    )

    profile = asyncio.run(meal_analysis_service.analyze("lunch"))

    assert model_client.estimation_calls == []
    assert profile == NutrientProfile(
        calories=500, protein=30, carbs=60, fat=20, sodium=900, fiber=5
    )


def test_gate_pass_output_is_still_clamped(
    meal_analysis_service: MealAnalysisService,
    model_client: FakeMealModelClient,
    nutritionix_client: FakeNutritionixClient,
) -> None:
    model_client.foods = [{"name": "family pizza"}]
    _branded(
        nutritionix_client,
        "family pizza",
        "pizza-1",
        nutritionix_food(1180, protein=50, carbs=150, fat=65, sodium=2600, fiber=9),
    )

    profile = asyncio.run(meal_analysis_service.analyze("pizza"))

    assert model_client.estimation_calls == []
    assert profile.calories == 1100
    assert profile.fat == 60
    assert profile.sodium == 2000


def test_force_micros_bypasses_gate(
    meal_analysis_service: MealAnalysisService,
    model_client: FakeMealModelClient,
    nutritionix_client: FakeNutritionixClient,
) -> None:
    model_client.foods = [{"name": "chicken rice bowl"}]
    model_client.estimate = {"calories": 900, "vitaminC": 15, "magnesium": 80}
    _branded(
        nutritionix_client,
        "chicken rice bowl",
        "bowl-1",
        nutritionix_food(600, protein=40, carbs=70, fat=15),
    )

    profile = asyncio.run(
        meal_analysis_service.analyze("chicken rice bowl", force_micros=True)
    )

    assert len(model_client.estimation_calls) == 1
    assert profile.calories == 600
    assert profile.vitamin_c == 15
    assert profile.magnesium == 80


def test_repeated_request_is_served_from_cache(
    meal_analysis_service: MealAnalysisService,
    model_client: FakeMealModelClient,
    nutritionix_client: FakeNutritionixClient,
) -> None:
    model_client.foods = [{"name": "oatmeal"}]
    model_client.estimate = {"calories": 300, "protein": 10, "fiber": 8}

    first = asyncio.run(meal_analysis_service.analyze("oatmeal", "https://img/1"))
    lookups = len(nutritionix_client.calls)
    second = asyncio.run(meal_analysis_service.analyze(" oatmeal ", "https://img/1"))

    assert second is first
    assert second.as_response() == first.as_response()
    assert len(model_client.identification_calls) == 1
    assert len(model_client.estimation_calls) == 1
    assert len(nutritionix_client.calls) == lookups


def test_unparsable_identification_uses_whole_description(
    meal_analysis_service: MealAnalysisService,
    model_client: FakeMealModelClient,
    nutritionix_client: FakeNutritionixClient,
) -> None:
    model_client.identification_text = "I could not find any food, sorry."

    asyncio.run(meal_analysis_service.analyze("Coca-Cola 355ml"))

    assert ("instant", "coca cola 355ml") in nutritionix_client.calls


def test_duplicate_items_are_resolved_once(
    meal_analysis_service: MealAnalysisService,
    model_client: FakeMealModelClient,
    nutritionix_client: FakeNutritionixClient,
) -> None:
    model_client.foods = [
        {"name": "French fries", "portion_text": "large"},
        {"name": "french fries!", "portion_text": "small"},
    ]
    nutritionix_client.natural["french fries"] = nutritionix_food(
        300, protein=4, carbs=40, fat=15
    )

    profile = asyncio.run(meal_analysis_service.analyze("fries"))

    assert nutritionix_client.calls.count(("natural", "french fries")) == 1
    assert profile.calories == 390


def test_every_response_is_within_clamp_ranges(
    meal_analysis_service: MealAnalysisService,
    model_client: FakeMealModelClient,
) -> None:
    model_client.estimate = {
        "calories": 99999,
        "protein": -5,
        "carbs": "lots",
        "fat": 1e9,
        "sodium": float("inf"),
        "fiber": 400,
        "water": -100,
        "chloride": 50,
    }

    profile = asyncio.run(meal_analysis_service.analyze("mystery stew"))
    payload = profile.as_response()

    for name, (low, high) in CLAMP_RANGES.items():
        assert low <= getattr(profile, name) <= high
    for name in MICRO_FIELDS:
        assert getattr(profile, name) >= 0
    assert all(isinstance(value, int) for value in payload.values())
    assert len(payload) == 19
