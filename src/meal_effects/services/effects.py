"""Rule-based health effects of a meal.

Each effect is its own ladder of thresholds. Risk effects (fat-forming,
inflammation) and nutrient-presence effects (strength, immunity,
anti-inflammatory) start at 0; felt effects (energizing, gut-friendly,
mood-lifting) start at the neutral midpoint 5.
"""

from collections.abc import Callable

from meal_effects.domain.effects import Badges, EffectResult, MealEffects
from meal_effects.domain.foods import NutrientTotals
from meal_effects.domain.meals import MealContext

MIN_SCORE = 0.0
MAX_SCORE = 10.0
NEUTRAL_START = 5.0
DEFAULT_BODY_MASS_KG = 70.0
SATURATED_FAT_SHARE = 0.3


def compute_effects(
    totals: NutrientTotals, badges: Badges, context: MealContext | None = None
) -> MealEffects:
    """Compute all eight effects."""
    context = context or MealContext()
    return MealEffects(
        fat_forming=fat_forming(totals, badges, context),
        strength=strength(totals, badges, context),
        immunity=immunity(totals, badges, context),
        inflammation=inflammation(totals, badges, context),
        anti_inflammatory=anti_inflammatory(totals, badges, context),
        energizing=energizing(totals, badges, context),
        gut_friendly=gut_friendly(totals, badges, context),
        mood_lifting=mood_lifting(totals, badges, context),
    )


def fat_forming(
    totals: NutrientTotals, badges: Badges, context: MealContext
) -> EffectResult:
    """How strongly the meal promotes fat storage (lower is better)."""
    score = 0.0
    why: list[str] = []

    if totals.fat >= 50:
        score += 3
        why.append("Very high fat content (>=50g) promotes fat storage")
    elif totals.fat >= 35:
        score += 2
        why.append("High fat content (>=35g) may contribute to weight gain")
    elif totals.fat >= 25:
        score += 1
        why.append("Moderate fat content (>=25g)")

    if totals.sugar >= 30:
        score += 3
        why.append("Very high sugar content (>=30g) promotes fat storage")
    elif totals.sugar >= 20:
        score += 2
        why.append("High sugar content (>=20g) may contribute to weight gain")
    elif totals.sugar >= 15:
        score += 1
        why.append("Moderate sugar content (>=15g)")

    if _gi_at_least(badges, 70):
        score += 2
        why.append("High glycemic index (>=70) promotes fat storage")
    elif _gi_at_least(badges, 55):
        score += 1
        why.append("Moderate glycemic index (>=55)")

    if badges.nova >= 4:
        score += 2
        why.append("Ultra-processed foods (NOVA 4) promote fat storage")
    elif badges.nova >= 3:
        score += 1
        why.append("Processed foods (NOVA 3) may contribute to weight gain")

    for reason in _behavior_reasons(
        context,
        late_night="Late night eating increases fat storage",
        sedentary="Sedentary behavior after meal promotes fat storage",
        stress="Stress eating increases fat formation",
        packaged="Packaged/long-stored foods promote fat storage",
        mindless="Mindless eating increases fat formation",
    ):
        score += 1
        why.append(reason)

    return _result(score, why, _fat_forming_label)


def strength(
    totals: NutrientTotals, badges: Badges, context: MealContext
) -> EffectResult:
    """Support for muscle building and maintenance."""
    score = 0.0
    why: list[str] = []

    if totals.protein >= 40:
        score += 7
        why.append("Excellent protein content (>=40g) for muscle building")
    elif totals.protein >= 30:
        score += 6
        why.append("Very good protein content (>=30g) for strength")
    elif totals.protein >= 20:
        score += 5
        why.append("Good protein content (>=20g) for maintenance")
    elif totals.protein >= 15:
        score += 3
        why.append("Moderate protein content (>=15g)")
    elif totals.protein >= 10:
        score += 1
        why.append("Low protein content (>=10g)")
    else:
        why.append("Very low protein content (<10g)")

    if context.post_workout:
        body_mass = context.body_mass_kg or DEFAULT_BODY_MASS_KG
        required_carbs = max(50.0, body_mass * 0.8)
        if totals.carbs >= required_carbs:
            score += 2
            why.append(
                f"Post-workout carbs ({totals.carbs:g}g) for glycogen replenishment"
            )
        else:
            why.append(
                f"Post-workout carbs ({totals.carbs:g}g) below optimal "
                f"({required_carbs:g}g)"
            )

    if totals.iron >= 6:
        score += 1
        why.append("Good iron content (>=6mg) for oxygen transport")
    elif totals.iron >= 3:
        why.append("Moderate iron content (>=3mg)")
    else:
        why.append("Low iron content (<3mg)")

    return _result(score, why, _benefit_level)


def immunity(
    totals: NutrientTotals, badges: Badges, context: MealContext
) -> EffectResult:
    """Support for immune function."""
    score = 0.0
    why: list[str] = []

    if totals.fiber >= 8:
        score += 3
        why.append("Excellent fiber content (>=8g) for gut health")
    elif totals.fiber >= 5:
        score += 2
        why.append("Good fiber content (>=5g) for immunity")
    elif totals.fiber >= 3:
        score += 1
        why.append("Moderate fiber content (>=3g)")
    else:
        why.append("Low fiber content (<3g)")

    if totals.vitamin_c >= 60:
        score += 2
        why.append("Excellent vitamin C (>=60mg) for immune function")
    elif totals.vitamin_c >= 30:
        score += 1
        why.append("Good vitamin C (>=30mg)")
    else:
        why.append("Low vitamin C (<30mg)")

    if totals.zinc >= 5 or totals.selenium >= 30:
        score += 2
        if totals.zinc >= 5:
            why.append(f"Good zinc content ({totals.zinc:g}mg) for immune cells")
        if totals.selenium >= 30:
            why.append(
                f"Good selenium content ({totals.selenium:g}µg) "
                "for antioxidant defense"
            )
    elif totals.zinc >= 2 or totals.selenium >= 15:
        score += 1
        why.append("Moderate zinc/selenium content")
    else:
        why.append("Low zinc/selenium content")

    if context.fermented:
        score += 2
        why.append("Contains fermented foods for gut microbiome")

    if context.plant_diversity >= 5:
        score += 1
        why.append("High plant diversity (>=5 types) for phytonutrients")
    elif context.plant_diversity >= 3:
        why.append("Moderate plant diversity (>=3 types)")
    else:
        why.append("Low plant diversity (<3 types)")

    return _result(score, why, _benefit_level)


def inflammation(
    totals: NutrientTotals, badges: Badges, context: MealContext
) -> EffectResult:
    """How strongly the meal promotes inflammation (lower is better)."""
    score = 0.0
    why: list[str] = []

    if badges.nova >= 4:
        score += 3
        why.append("Ultra-processed foods (NOVA 4) increase inflammation")
    elif badges.nova >= 3:
        score += 2
        why.append("Processed foods (NOVA 3) contribute to inflammation")

    if context.added_sugar >= 15:
        score += 2
        why.append("High added sugar (>=15g) increases inflammation")
    elif context.added_sugar >= 10:
        score += 1
        why.append("Moderate added sugar (>=10g) may increase inflammation")

    if _gi_at_least(badges, 70):
        score += 2
        why.append("High glycemic index (>=70) increases inflammation")
    elif _gi_at_least(badges, 55):
        score += 1
        why.append("Moderate glycemic index (>=55) may increase inflammation")

    # No saturated fat in the profile; estimate it as a share of total fat.
    if totals.fat * SATURATED_FAT_SHARE >= 10:
        score += 1
        why.append("High saturated fat may increase inflammation")

    for reason in _behavior_reasons(
        context,
        late_night="Late night eating increases inflammation",
        sedentary="Sedentary behavior after meal increases inflammation",
        stress="Stress eating increases inflammation",
        packaged="Packaged/long-stored foods increase inflammation",
        mindless="Mindless eating increases inflammation",
    ):
        score += 1
        why.append(reason)

    return _result(score, why, _inflammation_label)


def anti_inflammatory(
    totals: NutrientTotals, badges: Badges, context: MealContext
) -> EffectResult:
    """How strongly the meal counters inflammation."""
    score = 0.0
    why: list[str] = []

    if totals.fiber >= 8:
        score += 3
        why.append("High fiber (>=8g) reduces inflammation")
    elif totals.fiber >= 5:
        score += 2
        why.append("Good fiber (>=5g) helps reduce inflammation")
    elif totals.fiber >= 3:
        score += 1
        why.append("Moderate fiber (>=3g) has some anti-inflammatory benefits")

    if totals.omega3 >= 0.5:
        score += 3
        why.append("Good omega-3 content (>=0.5g) for strong anti-inflammatory effects")
    elif totals.omega3 >= 0.2:
        score += 2
        why.append("Moderate omega-3 content (>=0.2g) for anti-inflammatory effects")
    elif totals.omega3 >= 0.1:
        score += 1
        why.append("Some omega-3 content (>=0.1g) for mild anti-inflammatory effects")

    if totals.vitamin_c >= 60:
        score += 2
        why.append("Excellent vitamin C (>=60mg) for antioxidant protection")
    elif totals.vitamin_c >= 30:
        score += 1
        why.append("Good vitamin C (>=30mg) for anti-inflammatory benefits")

    if context.plant_diversity >= 5:
        score += 2
        why.append("High plant diversity (>=5 types) provides diverse phytonutrients")
    elif context.plant_diversity >= 3:
        score += 1
        why.append("Moderate plant diversity (>=3 types) for phytonutrients")

    if context.fermented:
        score += 1
        why.append("Contains fermented foods with anti-inflammatory effects")

    return _result(score, why, _anti_inflammatory_label)


def energizing(
    totals: NutrientTotals, badges: Badges, context: MealContext
) -> EffectResult:
    """Sustained energy after the meal."""
    score = NEUTRAL_START
    why: list[str] = []

    if totals.carbs >= 30 and badges.gi is not None:
        if badges.gi < 55:
            score += 2
            why.append("Good complex carbs (>=30g) with low GI for sustained energy")
        elif badges.gi < 70:
            score += 1
            why.append("Moderate carbs (>=30g) for energy")

    if totals.protein >= 15:
        score += 1
        why.append("Good protein (>=15g) for stable blood sugar")

    if totals.fiber >= 5:
        score += 1
        why.append("Good fiber (>=5g) for slow, steady energy release")

    if totals.fat >= 40:
        score -= 1
        why.append("High fat content (>=40g) may cause sluggishness")

    if _gi_at_least(badges, 70):
        score -= 1
        why.append("High GI foods may cause energy crashes")

    if totals.sugar >= 25:
        score -= 1
        why.append("High sugar (>=25g) may cause energy spikes and crashes")

    return _result(score, why, _energizing_level)


def gut_friendly(
    totals: NutrientTotals, badges: Badges, context: MealContext
) -> EffectResult:
    """Support for digestion and the gut microbiome."""
    score = NEUTRAL_START
    why: list[str] = []

    if totals.fiber >= 8:
        score += 3
        why.append("Excellent fiber content (>=8g) for gut health")
    elif totals.fiber >= 5:
        score += 2
        why.append("Good fiber content (>=5g) for gut health")
    elif totals.fiber >= 3:
        score += 1
        why.append("Moderate fiber content (>=3g) for gut health")

    if context.fermented:
        score += 2
        why.append("Contains fermented foods for gut microbiome")

    if context.plant_diversity >= 5:
        score += 1
        why.append("High plant diversity (>=5 types) for gut health")
    elif context.plant_diversity >= 3:
        score += 1
        why.append("Moderate plant diversity (>=3 types) for gut health")

    if totals.fat >= 45:
        score -= 1
        why.append("Very high fat content (>=45g) may cause digestive discomfort")

    if badges.nova >= 4:
        score -= 1
        why.append("Ultra-processed foods may irritate the gut")

    if totals.sugar >= 30:
        score -= 1
        why.append("High sugar content (>=30g) may feed harmful gut bacteria")

    return _result(score, why, _gut_friendly_level)


def mood_lifting(
    totals: NutrientTotals, badges: Badges, context: MealContext
) -> EffectResult:
    """Support for a positive, stable mood."""
    score = NEUTRAL_START
    why: list[str] = []

    if totals.omega3 >= 0.8:
        score += 2
        why.append("Excellent omega-3 content (>=0.8g) for brain health and mood")
    elif totals.omega3 >= 0.5:
        score += 1
        why.append("Good omega-3 content (>=0.5g) for mood support")

    if context.fermented:
        score += 1
        why.append("Fermented foods support gut-brain axis and mood")

    if totals.sugar >= 25:
        score -= 1
        why.append("High sugar (>=25g) may cause mood swings")

    if badges.nova >= 4:
        score -= 1
        why.append("Ultra-processed foods may negatively affect mood")

    if context.added_sugar >= 20:
        score -= 1
        why.append("High added sugar (>=20g) may cause mood instability")

    return _result(score, why, _mood_lifting_level)


def clamp_score(score: float) -> float:
    """Clamp an effect score into [0, 10]."""
    return max(MIN_SCORE, min(MAX_SCORE, score))


def _result(score: float, why: list[str], label: Callable[[float], str]) -> EffectResult:
    clamped = clamp_score(score)
    return EffectResult(score=clamped, label=label(clamped), why=tuple(why))


def _gi_at_least(badges: Badges, threshold: int) -> bool:
    return badges.gi is not None and badges.gi >= threshold


def _behavior_reasons(  # noqa: PLR0913
    context: MealContext,
    *,
    late_night: str,
    sedentary: str,
    stress: str,
    packaged: str,
    mindless: str,
) -> list[str]:
    """Reasons for each behavioral context flag that is set."""
    flags = (
        (context.late_night_eating, late_night),
        (context.sedentary_after_meal, sedentary),
        (context.stress_eating, stress),
        (context.packaged_stored_long, packaged),
        (context.mindless_eating, mindless),
    )
    return [reason for flag, reason in flags if flag]


def _fat_forming_label(score: float) -> str:
    if score <= 2:
        return "Very Low"
    if score <= 4:
        return "Low"
    if score <= 6:
        return "Moderate"
    if score <= 8:
        return "High"
    return "Very High"


def _inflammation_label(score: float) -> str:
    if score <= 3:
        return "Low"
    if score <= 6:
        return "Medium"
    return "High"


def _benefit_level(score: float) -> str:
    if score >= 8:
        return "Excellent"
    if score >= 6:
        return "Very Good"
    if score >= 4:
        return "Good"
    if score >= 2:
        return "Fair"
    return "Poor"


def _anti_inflammatory_label(score: float) -> str:
    if score >= 8:
        return "Very High"
    if score >= 6:
        return "High"
    if score >= 4:
        return "Medium"
    if score >= 2:
        return "Low"
    return "Very Low"


def _energizing_level(score: float) -> str:
    if score >= 8:
        return "Very Energizing"
    if score >= 6:
        return "Energizing"
    if score >= 4:
        return "Neutral"
    if score >= 2:
        return "Sluggish"
    return "Very Sluggish"


def _gut_friendly_level(score: float) -> str:
    if score >= 8:
        return "Very Gut-Friendly"
    if score >= 6:
        return "Gut-Friendly"
    if score >= 4:
        return "Neutral"
    if score >= 2:
        return "May Cause Discomfort"
    return "Likely Uncomfortable"


def _mood_lifting_level(score: float) -> str:
    if score >= 8:
        return "Very Mood-Lifting"
    if score >= 6:
        return "Mood-Lifting"
    if score >= 4:
        return "Neutral"
    if score >= 2:
        return "May Affect Mood"
    return "Likely Negative"
