"""Supabase repository for the local food catalog."""

from dataclasses import dataclass

from supabase import Client

from meal_effects.domain.foods import FoodNutrientProfile
from meal_effects.services.food_resolver import FoodCatalog
from meal_effects.services.normalization import normalize_local

_COLUMNS = (
    "id, name, kcal, protein, fat, carbs, fiber, sugar, vitamin_c, zinc, "
    "selenium, iron, omega3, gi, fodmap, nova_class, tags"
)


@dataclass
class SupabaseFoodCatalog(FoodCatalog):
    """Supabase implementation for catalog lookups."""

    client: Client

    def get_foods(self, food_ids: list[str]) -> list[FoodNutrientProfile]:
        """Return catalog foods for the given ids in one query."""
        if not food_ids:
            return []
        response = (
            self.client.table("food_items")
            .select(_COLUMNS)
            .in_("id", food_ids)
            .execute()
        )
        return [normalize_local(row) for row in response.data or []]
