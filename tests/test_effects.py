"""Tests for the rule-based effects engine."""

from meal_effects.domain.effects import EFFECT_KEYS, Badges
from meal_effects.domain.foods import Fodmap, NutrientTotals
from meal_effects.domain.meals import MealContext
from meal_effects.services.aggregate import aggregate
from meal_effects.services.badges import infer_badges
from meal_effects.services.effects import (
    clamp_score,
    compute_effects,
    energizing,
    fat_forming,
    immunity,
    inflammation,
    strength,
)
from tests.conftest import make_profile

_ALL_FLAGS = MealContext(
    late_night_eating=True,
    sedentary_after_meal=True,
    stress_eating=True,
    packaged_stored_long=True,
    mindless_eating=True,
    added_sugar=30,
)


def _badges(gi: int | None = None, nova: int = 1) -> Badges:
    return Badges(protein=False, veg=False, gi=gi, fodmap=Fodmap.UNKNOWN, nova=nova)


def test_ultra_processed_sugary_item_is_fat_forming() -> None:
    candy = make_profile("candy", nova_class=4, sugar=35, carbs=40, kcal=300)
    items = [(candy, 100)]
    totals = aggregate(items)

    effects = compute_effects(totals, infer_badges(totals, items))

    fat = effects.fat_forming
    assert fat.score == 5
    assert fat.label == "Moderate"
    assert "Very high sugar content (>=30g) promotes fat storage" in fat.why
    assert "Ultra-processed foods (NOVA 4) promote fat storage" in fat.why


def test_scores_are_clamped_under_adversarial_input() -> None:
    totals = NutrientTotals(
        kcal=5000, protein=300, fat=400, carbs=600, fiber=90, sugar=300,
        vitamin_c=900, zinc=90, selenium=900, iron=90, omega3=30,
    )
    context = MealContext(
        post_workout=True, fermented=True, plant_diversity=40,
        late_night_eating=True, sedentary_after_meal=True, stress_eating=True,
        packaged_stored_long=True, mindless_eating=True, added_sugar=500,
    )

    effects = compute_effects(totals, _badges(gi=95, nova=4), context)

    for _, effect in effects.items():
        assert 0 <= effect.score <= 10
    assert effects.fat_forming.score == 10
    assert effects.fat_forming.label == "Very High"
    assert effects.inflammation.score == 10
    assert effects.inflammation.label == "High"


def test_empty_meal_keeps_neutral_starting_points() -> None:
    effects = compute_effects(NutrientTotals.zero(), Badges.empty(), MealContext())

    assert [key for key, _ in effects.items()] == list(EFFECT_KEYS)
    assert effects.fat_forming.score == 0
    assert effects.fat_forming.label == "Very Low"
    assert effects.strength.why == (
        "Very low protein content (<10g)",
        "Low iron content (<3mg)",
    )
    assert effects.energizing.score == 5
    assert effects.energizing.label == "Neutral"
    assert effects.gut_friendly.label == "Neutral"
    assert effects.mood_lifting.label == "Neutral"


def test_compute_effects_is_deterministic() -> None:
    totals = NutrientTotals(kcal=600, protein=35, fat=20, carbs=60, fiber=9, sugar=12)
    badges = _badges(gi=50)
    context = MealContext(fermented=True, plant_diversity=4)

    assert compute_effects(totals, badges, context) == compute_effects(
        totals, badges, context
    )


def test_strength_post_workout_carb_requirement_scales_with_body_mass() -> None:
    totals = NutrientTotals(protein=45, carbs=60, iron=7)

    light = strength(totals, _badges(), MealContext(post_workout=True))
    heavy = strength(totals, _badges(), MealContext(post_workout=True, body_mass_kg=100))

    assert light.score == 10
    assert light.label == "Excellent"
    assert heavy.score == 8
    assert "Post-workout carbs (60g) below optimal (80g)" in heavy.why


def test_immunity_reports_zinc_and_selenium_separately() -> None:
    totals = NutrientTotals(fiber=6, vitamin_c=70, zinc=6, selenium=35)

    result = immunity(totals, _badges(), MealContext(fermented=True, plant_diversity=5))

    assert result.score == 9
    assert "Good zinc content (6mg) for immune cells" in result.why
    assert "Good selenium content (35µg) for antioxidant defense" in result.why


def test_inflammation_counts_behavioral_flags() -> None:
    result = inflammation(NutrientTotals(), _badges(), _ALL_FLAGS)

    assert result.score == 7
    assert result.label == "High"


def test_fat_forming_gi_bands() -> None:
    assert fat_forming(NutrientTotals(), _badges(gi=72), MealContext()).score == 2
    assert fat_forming(NutrientTotals(), _badges(gi=60), MealContext()).score == 1
    assert fat_forming(NutrientTotals(), _badges(gi=None), MealContext()).score == 0


def test_energizing_needs_known_low_gi_for_carb_bonus() -> None:
    totals = NutrientTotals(carbs=40, protein=20, fiber=6)

    assert energizing(totals, _badges(gi=45), MealContext()).label == "Very Energizing"
    assert energizing(totals, _badges(gi=None), MealContext()).score == 7


def test_clamp_score() -> None:
    assert clamp_score(-3) == 0
    assert clamp_score(14) == 10
    assert clamp_score(6.5) == 6.5
