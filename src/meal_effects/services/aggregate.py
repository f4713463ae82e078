"""Nutrient aggregation for meals."""

import math
from collections.abc import Iterable
from dataclasses import dataclass

from meal_effects.domain.foods import NUTRIENT_FIELDS, FoodNutrientProfile, NutrientTotals

KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_FAT = 9
KCAL_PER_G_CARBS = 4


@dataclass(frozen=True)
class MacroShare:
    """Share of calories from each macronutrient, in whole percent."""

    protein: int
    fat: int
    carbs: int


def aggregate(
    items: Iterable[tuple[FoodNutrientProfile | None, object]],
) -> NutrientTotals:
    """Sum per-100g profiles scaled by grams into meal totals.

    Items without a profile or without a positive gram amount are skipped.
    Rounding to 2 decimals happens once, after summation.
    """
    sums = dict.fromkeys(NUTRIENT_FIELDS, 0.0)
    for profile, grams in countable(items):
        factor = grams / 100.0
        for name in NUTRIENT_FIELDS:
            sums[name] += getattr(profile.nutrients, name) * factor
    return NutrientTotals(**{name: round(value, 2) for name, value in sums.items()})


def countable(
    items: Iterable[tuple[FoodNutrientProfile | None, object]],
) -> list[tuple[FoodNutrientProfile, float]]:
    """Keep the items that contribute to a meal: a profile and positive grams."""
    return [
        (profile, float(grams))
        for profile, grams in items
        if profile is not None and _is_positive_number(grams)
    ]


def macro_percentages(totals: NutrientTotals) -> MacroShare:
    """Return the share of calories from protein, fat and carbs."""
    if totals.kcal == 0:
        return MacroShare(protein=0, fat=0, carbs=0)
    return MacroShare(
        protein=_percent(totals.protein * KCAL_PER_G_PROTEIN, totals.kcal),
        fat=_percent(totals.fat * KCAL_PER_G_FAT, totals.kcal),
        carbs=_percent(totals.carbs * KCAL_PER_G_CARBS, totals.kcal),
    )


def protein_density(totals: NutrientTotals) -> float:
    """Grams of protein per 100 kcal."""
    if totals.kcal == 0:
        return 0.0
    return round(totals.protein / totals.kcal * 100, 2)


def fiber_density(totals: NutrientTotals) -> float:
    """Grams of fiber per 100 kcal."""
    if totals.kcal == 0:
        return 0.0
    return round(totals.fiber / totals.kcal * 100, 2)


def sugar_share_of_carbs(totals: NutrientTotals) -> int:
    """Sugar as a percentage of total carbohydrate."""
    if totals.carbs == 0:
        return 0
    return _percent(totals.sugar, totals.carbs)


def nutrient_warnings(totals: NutrientTotals) -> list[str]:
    """Flag totals outside the ranges expected for a single meal."""
    if totals.is_empty():
        return []
    warnings: list[str] = []
    if totals.kcal > 2000:
        warnings.append("Very high calorie meal (>2000 kcal)")
    if totals.kcal < 50:
        warnings.append("Very low calorie meal (<50 kcal)")
    if totals.protein > 100:
        warnings.append("Very high protein meal (>100g)")
    if totals.fat > 100:
        warnings.append("Very high fat meal (>100g)")
    if totals.carbs > 300:
        warnings.append("Very high carb meal (>300g)")
    if totals.fiber > 50:
        warnings.append("Very high fiber meal (>50g) - may cause digestive issues")
    return warnings


def _is_positive_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value) and value > 0


def _percent(part: float, whole: float) -> int:
    return math.floor(part / whole * 100 + 0.5)
