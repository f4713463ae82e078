"""Badge inference for meals."""

import math
from collections.abc import Sequence

from meal_effects.domain.effects import Badges
from meal_effects.domain.foods import (
    FODMAP_SEVERITY,
    Fodmap,
    FoodNutrientProfile,
    NutrientTotals,
)

PROTEIN_BADGE_GRAMS = 20
PROTEIN_BADGE_DENSITY = 0.12
VEG_BADGE_FIBER_GRAMS = 5
VEG_TAGS = frozenset({"veg", "leafy", "vegetable", "vegetables"})

GI_LOW_MAX = 55
GI_MEDIUM_MAX = 69

_NOVA_DESCRIPTIONS = {
    1: "Unprocessed",
    2: "Minimally processed",
    3: "Processed",
    4: "Ultra-processed",
}


def infer_badges(
    totals: NutrientTotals,
    items: Sequence[tuple[FoodNutrientProfile, float]],
) -> Badges:
    """Derive badges from meal totals and the profiles of its items."""
    return Badges(
        protein=_protein_badge(totals),
        veg=_veg_badge(totals, items),
        gi=_gi_badge(items),
        fodmap=_fodmap_badge(items),
        nova=_nova_badge(items),
    )


def _protein_badge(totals: NutrientTotals) -> bool:
    density = totals.protein / totals.kcal * 100 if totals.kcal > 0 else 0.0
    return totals.protein >= PROTEIN_BADGE_GRAMS or density >= PROTEIN_BADGE_DENSITY


def _veg_badge(
    totals: NutrientTotals, items: Sequence[tuple[FoodNutrientProfile, float]]
) -> bool:
    has_veg_tag = any(profile.tags & VEG_TAGS for profile, _ in items)
    return has_veg_tag or totals.fiber >= VEG_BADGE_FIBER_GRAMS


def _gi_badge(items: Sequence[tuple[FoodNutrientProfile, float]]) -> int | None:
    """Carbohydrate-weighted mean GI; None when no item has GI data and carbs."""
    carb_weight = 0.0
    weighted_sum = 0.0
    for profile, grams in items:
        if profile.gi is None or profile.gi < 0:
            continue
        carbs = profile.nutrients.carbs * grams / 100.0
        if carbs <= 0:
            continue
        carb_weight += carbs
        weighted_sum += carbs * profile.gi
    if carb_weight == 0:
        return None
    return math.floor(weighted_sum / carb_weight + 0.5)


def _fodmap_badge(items: Sequence[tuple[FoodNutrientProfile, float]]) -> Fodmap:
    worst = Fodmap.UNKNOWN
    for profile, _ in items:
        severity = FODMAP_SEVERITY.get(profile.fodmap)
        if severity is None:
            continue
        if severity > FODMAP_SEVERITY[worst]:
            worst = Fodmap(profile.fodmap)
    return worst


def _nova_badge(items: Sequence[tuple[FoodNutrientProfile, float]]) -> int:
    nova = 1
    for profile, _ in items:
        if isinstance(profile.nova_class, int) and 1 <= profile.nova_class <= 4:
            nova = max(nova, profile.nova_class)
    return nova


def describe_badges(badges: Badges) -> dict[str, str]:
    """Human-readable description of each badge."""
    return {
        "protein": (
            "Good protein content (>=20g or high density)"
            if badges.protein
            else "Consider adding protein sources"
        ),
        "veg": (
            "Contains vegetables or good fiber"
            if badges.veg
            else "Add vegetables or fiber-rich foods"
        ),
        "gi": (
            f"GI: {badges.gi} ({gi_class(badges.gi)})"
            if badges.gi is not None
            else "GI data not available"
        ),
        "fodmap": f"FODMAP: {badges.fodmap.value}",
        "nova": f"NOVA {badges.nova}: {_NOVA_DESCRIPTIONS.get(badges.nova, 'Unknown')}",
    }


def gi_class(gi: int | None) -> str:
    """Classify a glycemic index as Low, Medium or High."""
    if gi is None:
        return "Unknown"
    if gi <= GI_LOW_MAX:
        return "Low"
    if gi <= GI_MEDIUM_MAX:
        return "Medium"
    return "High"
