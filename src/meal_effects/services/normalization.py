"""Normalize catalog rows and provider payloads into nutrient profiles.

Each source has its own mapping table from provider field to canonical
nutrient. Everything downstream of these functions only sees
``FoodNutrientProfile``.
"""

import math

from meal_effects.domain.foods import (
    NUTRIENT_FIELDS,
    Fodmap,
    FoodNutrientProfile,
    FoodSource,
    NutrientTotals,
)

KJ_PER_KCAL = 4.184

# Catalog rows may come from older imports that used camelCase columns.
_LOCAL_ALIASES: dict[str, str] = {"vitamin_c": "vitaminC"}

# USDA FoodData Central: nutrient names as reported in foodNutrients.
# The first name present wins.
_USDA_NUTRIENT_NAMES: dict[str, tuple[str, ...]] = {
    "kcal": ("Energy",),
    "protein": ("Protein",),
    "fat": ("Total lipid (fat)",),
    "carbs": ("Carbohydrate, by difference",),
    "fiber": ("Fiber, total dietary",),
    "sugar": ("Sugars, total including NLEA", "Total Sugars", "Sugars, Total"),
    "vitamin_c": ("Vitamin C, total ascorbic acid",),
    "zinc": ("Zinc, Zn",),
    "selenium": ("Selenium, Se",),
    "iron": ("Iron, Fe",),
}
# Summed rather than first-match.
_USDA_OMEGA3_NAMES: tuple[str, ...] = (
    "PUFA 18:3 n-3 c,c,c (ALA)",
    "PUFA 20:5 n-3 (EPA)",
    "PUFA 22:6 n-3 (DHA)",
)

# Open Food Facts: nutriments key and factor into canonical units.
# OFF reports vitamins and minerals in grams per 100 g.
_OFF_NUTRIMENTS: dict[str, tuple[str, float]] = {
    "kcal": ("energy-kcal_100g", 1.0),
    "protein": ("proteins_100g", 1.0),
    "fat": ("fat_100g", 1.0),
    "carbs": ("carbohydrates_100g", 1.0),
    "fiber": ("fiber_100g", 1.0),
    "sugar": ("sugars_100g", 1.0),
    "vitamin_c": ("vitamin-c_100g", 1000.0),
    "zinc": ("zinc_100g", 1000.0),
    "selenium": ("selenium_100g", 1_000_000.0),
    "iron": ("iron_100g", 1000.0),
    "omega3": ("omega-3-fat_100g", 1.0),
}
_OFF_ENERGY_KJ_KEY = "energy_100g"

_VEG_CATEGORY_TAGS = {"vegetables", "leafy-vegetables"}


def normalize_local(row: dict[str, object]) -> FoodNutrientProfile:
    """Build a profile from a local catalog row."""
    nested = row.get("nutrients")
    source = nested if isinstance(nested, dict) else row
    values = {}
    for name in NUTRIENT_FIELDS:
        raw = source.get(name)
        if raw is None and name in _LOCAL_ALIASES:
            raw = source.get(_LOCAL_ALIASES[name])
        values[name] = to_nutrient(raw)
    return FoodNutrientProfile(
        food_id=str(row.get("id", "")),
        name=str(row.get("name") or "Unknown Food"),
        source=FoodSource.LOCAL,
        nutrients=NutrientTotals(**values),
        gi=to_gi(row.get("gi")),
        fodmap=to_fodmap(row.get("fodmap")),
        nova_class=to_nova(row.get("nova_class", row.get("novaClass"))),
        tags=_to_tags(row.get("tags")),
    )


def normalize_usda(food_id: str, payload: dict[str, object]) -> FoodNutrientProfile:
    """Build a profile from a USDA FoodData Central food payload."""
    amounts = _usda_amounts(payload.get("foodNutrients") or [])
    values = {}
    for name, candidates in _USDA_NUTRIENT_NAMES.items():
        values[name] = next(
            (amounts[candidate] for candidate in candidates if candidate in amounts),
            0.0,
        )
    values["omega3"] = round(
        sum(amounts.get(candidate, 0.0) for candidate in _USDA_OMEGA3_NAMES), 4
    )
    return FoodNutrientProfile(
        food_id=food_id,
        name=str(payload.get("description") or "Unknown Food"),
        source=FoodSource.USDA,
        nutrients=NutrientTotals(**values),
    )


def normalize_openfoodfacts(
    food_id: str, payload: dict[str, object]
) -> FoodNutrientProfile | None:
    """Build a profile from an Open Food Facts product payload.

    Returns None when the payload reports the product as not found.
    """
    if payload.get("status") != 1:
        return None
    product = payload.get("product")
    if not isinstance(product, dict):
        return None
    nutriments = product.get("nutriments")
    if not isinstance(nutriments, dict):
        nutriments = {}

    values = {
        name: to_nutrient(nutriments.get(key)) * factor
        for name, (key, factor) in _OFF_NUTRIMENTS.items()
    }
    if values["kcal"] == 0.0:
        values["kcal"] = to_nutrient(nutriments.get(_OFF_ENERGY_KJ_KEY)) / KJ_PER_KCAL

    return FoodNutrientProfile(
        food_id=food_id,
        name=str(product.get("product_name") or "Unknown Product"),
        source=FoodSource.OPENFOODFACTS,
        nutrients=NutrientTotals(**{k: round(v, 4) for k, v in values.items()}),
        nova_class=to_nova(product.get("nova_group")),
        tags=_off_tags(product.get("categories_tags")),
    )


def to_nutrient(value: object) -> float:
    """Coerce a raw nutrient value into a finite, non-negative float."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def to_gi(value: object) -> int | None:
    """Coerce a glycemic index, keeping None for missing data."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return round(number)


def to_fodmap(value: object) -> Fodmap:
    """Coerce a FODMAP rating; unknown strings become ``Unknown``."""
    if isinstance(value, Fodmap):
        return value
    if isinstance(value, str):
        for rating in Fodmap:
            if rating.value.lower() == value.strip().lower():
                return rating
    return Fodmap.UNKNOWN


def to_nova(value: object) -> int:
    """Coerce a NOVA class into 1-4, defaulting to 1."""
    if isinstance(value, bool):
        return 1
    try:
        nova = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 1
    if 1 <= nova <= 4:
        return nova
    return 1


def _usda_amounts(food_nutrients: list[dict[str, object]]) -> dict[str, float]:
    amounts: dict[str, float] = {}
    for entry in food_nutrients:
        if not isinstance(entry, dict):
            continue
        info = entry.get("nutrient")
        info = info if isinstance(info, dict) else {}
        name = info.get("name") or entry.get("nutrientName")
        if not isinstance(name, str) or name in amounts:
            continue
        unit = str(info.get("unitName") or entry.get("unitName") or "").lower()
        if name == "Energy" and unit == "kj":
            continue
        amount = entry.get("amount", entry.get("value"))
        amounts[name] = to_nutrient(amount)
    return amounts


def _to_tags(value: object) -> frozenset[str]:
    if isinstance(value, str):
        value = value.split("|")
    if not isinstance(value, list | tuple | set | frozenset):
        return frozenset()
    return frozenset(str(tag).strip().lower() for tag in value if str(tag).strip())


def _off_tags(value: object) -> frozenset[str]:
    tags: set[str] = set()
    for tag in _to_tags(value):
        _, _, bare = tag.rpartition(":")
        tags.add(bare)
        if bare in _VEG_CATEGORY_TAGS:
            tags.add("vegetable")
    return frozenset(tags)
