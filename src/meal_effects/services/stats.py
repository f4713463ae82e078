"""Statistics over stored meal analyses."""

from collections.abc import Iterable

from meal_effects.domain.meals import MealRecord
from meal_effects.domain.stats import MealStats

HIGH_NOVA_CLASS = 4


def summarize_meals(meals: Iterable[MealRecord]) -> MealStats:
    """Average the stored scores and totals and count badge hits.

    Meals missing a value are left out of that value's average, and an
    average with no values is 0.
    """
    scores: list[float] = []
    calories: list[float] = []
    protein: list[float] = []
    fiber: list[float] = []
    total_meals = protein_meals = veg_meals = high_nova_meals = 0

    for meal in meals:
        total_meals += 1
        computed = meal.computed or {}
        totals = _as_mapping(computed.get("totals"))
        badges = _as_mapping(computed.get("badges"))

        _collect(scores, computed.get("mindfulMealScore"))
        _collect(calories, totals.get("kcal"))
        _collect(protein, totals.get("protein"))
        _collect(fiber, totals.get("fiber"))

        if badges.get("protein"):
            protein_meals += 1
        if badges.get("veg"):
            veg_meals += 1
        nova = badges.get("nova")
        if _is_number(nova) and nova >= HIGH_NOVA_CLASS:
            high_nova_meals += 1

    return MealStats(
        total_meals=total_meals,
        average_score=_mean(scores),
        average_calories=_mean(calories),
        average_protein=_mean(protein),
        average_fiber=_mean(fiber),
        protein_meals=protein_meals,
        veg_meals=veg_meals,
        high_nova_meals=high_nova_meals,
    )


def _as_mapping(value: object) -> dict[str, object]:
    return value if isinstance(value, dict) else {}


def _is_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _collect(values: list[float], value: object) -> None:
    if _is_number(value):
        values.append(float(value))  # type: ignore[arg-type]


def _mean(values: list[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)
