"""Mindful meal scoring (0-5) with rationale and a primary tip."""

from meal_effects.domain.effects import Badges, MealQuality, MindfulScoreResult
from meal_effects.domain.foods import NutrientTotals
from meal_effects.domain.meals import MealContext
from meal_effects.services.aggregate import macro_percentages

MAX_SCORE = 5.0
HIGH_SUGAR_GRAMS = 15
HIGH_GI = 70
BALANCED_CARB_SHARE = 45
GOOD_FIBER_GRAMS = 7

AFFIRMATION = "Great meal! Keep up the good choices."

_POSITIVE = "[+]"
_MISSING = "[-]"
_PENALTY = "[!]"


def score_meal(
    totals: NutrientTotals, badges: Badges, context: MealContext | None = None
) -> MindfulScoreResult:
    """Score a meal from its totals, badges and context."""
    context = context or MealContext()
    if totals.is_empty():
        return empty_score()

    score = 0.0
    rationale: list[str] = []
    tips: list[str] = []

    if badges.protein:
        score += 2
        rationale.append(f"{_POSITIVE} Good protein content (>=20g or high density)")
    else:
        rationale.append(f"{_MISSING} Low protein content")
        tips.append("Add 150g curd or 2 eggs for +12g protein")

    if badges.veg:
        score += 1
        rationale.append(f"{_POSITIVE} Contains vegetables or good fiber")
    else:
        rationale.append(f"{_MISSING} No vegetables or low fiber")
        tips.append("Add salad, dal, or leafy greens")

    if badges.nova >= 4:
        score -= 1
        rationale.append(f"{_PENALTY} Contains ultra-processed foods (NOVA 4)")
        tips.append("Swap one item for a whole-food equivalent")

    if totals.sugar >= HIGH_SUGAR_GRAMS:
        score -= 1
        rationale.append(f"{_PENALTY} High sugar content ({totals.sugar:g}g)")
        tips.append("Choose unsweetened versions or reduce portion")

    if badges.gi is not None and badges.gi >= HIGH_GI:
        score -= 1
        rationale.append(f"{_PENALTY} High glycemic index ({badges.gi})")
        if not badges.veg:
            tips.append("Add salad/dal or split portion to balance blood sugar")

    carb_share = macro_percentages(totals).carbs
    if carb_share <= BALANCED_CARB_SHARE:
        score += 1
        rationale.append(
            f"{_POSITIVE} Balanced carbohydrate ratio (<=45% of calories)"
        )
    elif totals.fiber >= GOOD_FIBER_GRAMS:
        score += 1
        rationale.append(f"{_POSITIVE} Good fiber content (>=7g)")
    else:
        rationale.append(f"{_PENALTY} High carbohydrate ratio or low fiber")
        tips.append("Add more vegetables or choose whole grains")

    if context.post_workout and badges.protein:
        score += 0.5
        rationale.append(f"{_POSITIVE} Good post-workout protein")

    if context.fermented and badges.veg:
        score += 0.5
        rationale.append(f"{_POSITIVE} Fermented vegetables for gut health")

    score = max(0.0, min(MAX_SCORE, score))
    return MindfulScoreResult(
        score=round(score, 1),
        rationale=tuple(rationale),
        tip=primary_tip(tips, totals, badges),
        tips=tuple(tips),
        quality=quality_for(score),
    )


def empty_score() -> MindfulScoreResult:
    """Result for a meal with no nutrient data."""
    return MindfulScoreResult(
        score=0.0,
        rationale=("No meal data available",),
        tip="Add foods to start analyzing your meal",
        tips=(),
        quality=MealQuality.NEEDS_IMPROVEMENT,
    )


def primary_tip(tips: list[str], totals: NutrientTotals, badges: Badges) -> str:
    """Pick the single most impactful tip.

    Priority: ultra-processed, missing protein, missing vegetables,
    high sugar, high GI.
    """
    if not tips:
        return AFFIRMATION
    if badges.nova >= 4:
        return "Swap one ultra-processed item for a whole-food equivalent"
    if not badges.protein:
        return "Add protein: 150g curd, 2 eggs, or 100g paneer"
    if not badges.veg:
        return "Add vegetables: salad, dal, or leafy greens"
    if totals.sugar >= HIGH_SUGAR_GRAMS:
        return "Choose unsweetened versions or reduce portion size"
    if badges.gi is not None and badges.gi >= HIGH_GI:
        return "Add fiber-rich foods to balance blood sugar"
    return tips[0]


def quality_for(score: float) -> MealQuality:
    """Map a 0-5 score onto a quality band."""
    if score >= 4.5:
        return MealQuality.EXCELLENT
    if score >= 3.5:
        return MealQuality.VERY_GOOD
    if score >= 2.5:
        return MealQuality.GOOD
    if score >= 1.5:
        return MealQuality.FAIR
    if score >= 0.5:
        return MealQuality.NEEDS_IMPROVEMENT
    return MealQuality.POOR
