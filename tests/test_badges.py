"""Tests for badge inference."""

from meal_effects.domain.foods import Fodmap, NutrientTotals
from meal_effects.services.aggregate import aggregate
from meal_effects.services.badges import describe_badges, gi_class, infer_badges
from tests.conftest import (
    CHICKEN_ID,
    COLA_ID,
    RICE_ID,
    SPINACH_ID,
    default_foods,
    make_profile,
)

FOODS = default_foods()


def _badges(items):  # type: ignore[no-untyped-def]
    return infer_badges(aggregate(items), items)


def test_protein_badge_by_grams_or_density() -> None:
    assert _badges([(FOODS[CHICKEN_ID], 100)]).protein
    lean = make_profile("lean", kcal=50, protein=7)
    assert _badges([(lean, 100)]).protein
    assert not _badges([(FOODS[COLA_ID], 100)]).protein


def test_veg_badge_by_tag_or_fiber() -> None:
    assert _badges([(FOODS[SPINACH_ID], 10)]).veg
    oats = make_profile("oats", kcal=380, fiber=10)
    assert _badges([(oats, 60)]).veg
    assert not _badges([(FOODS[CHICKEN_ID], 100)]).veg


def test_gi_is_weighted_by_carbohydrate() -> None:
    items = [(FOODS[RICE_ID], 200), (FOODS[SPINACH_ID], 100)]

    badges = _badges(items)

    # rice: 56g carbs at GI 73, spinach: 3.6g carbs at GI 15
    assert badges.gi == 69


def test_gi_ignores_items_without_data() -> None:
    bread = make_profile("bread", carbs=50)
    items = [(FOODS[RICE_ID], 100), (bread, 100)]

    assert _badges(items).gi == 73
    assert _badges([(bread, 100)]).gi is None


def test_fodmap_takes_worst_rating() -> None:
    items = [(FOODS[CHICKEN_ID], 100), (FOODS[COLA_ID], 330)]

    assert _badges(items).fodmap is Fodmap.HIGH
    assert _badges([(FOODS[CHICKEN_ID], 100)]).fodmap is Fodmap.LOW


def test_nova_takes_maximum_valid_class() -> None:
    odd = make_profile("odd", nova_class=7, kcal=10)

    assert _badges([(FOODS[CHICKEN_ID], 100), (FOODS[COLA_ID], 100)]).nova == 4
    assert _badges([(odd, 100)]).nova == 1


def test_describe_badges() -> None:
    badges = infer_badges(
        NutrientTotals(protein=31), [(FOODS[RICE_ID], 100)]
    )

    descriptions = describe_badges(badges)

    assert descriptions["gi"] == "GI: 73 (High)"
    assert descriptions["nova"] == "NOVA 1: Unprocessed"
    assert gi_class(55) == "Low"
    assert gi_class(60) == "Medium"
    assert gi_class(None) == "Unknown"
