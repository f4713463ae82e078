"""Domain models for meals and their computed analysis."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from meal_effects.domain.effects import Badges, MealEffects, MindfulScoreResult
from meal_effects.domain.foods import NutrientTotals

MAX_ITEM_GRAMS = 1000.0


@dataclass(frozen=True)
class MealItemInput:
    """A logged food item and its portion in grams."""

    food_id: str
    grams: float
    custom_name: str | None = None

    def as_dict(self) -> dict[str, object]:
        return {
            "foodId": self.food_id,
            "grams": self.grams,
            "customName": self.custom_name,
        }

    @classmethod
    def from_dict(cls, row: dict[str, object]) -> "MealItemInput":
        return cls(
            food_id=str(row.get("foodId") or ""),
            grams=float(row.get("grams") or 0.0),
            custom_name=row.get("customName"),
        )


_CONTEXT_KEYS: dict[str, str] = {
    "post_workout": "postWorkout",
    "body_mass_kg": "bodyMassKg",
    "plant_diversity": "plantDiversity",
    "fermented": "fermented",
    "added_sugar": "addedSugar",
    "late_night_eating": "lateNightEating",
    "sedentary_after_meal": "sedentaryAfterMeal",
    "stress_eating": "stressEating",
    "packaged_stored_long": "packagedStoredLong",
    "mindless_eating": "mindlessEating",
}


@dataclass(frozen=True)
class MealContext:
    """Situational flags reported with a meal."""

    post_workout: bool = False
    body_mass_kg: float | None = None
    plant_diversity: int = 0
    fermented: bool = False
    added_sugar: float = 0.0
    late_night_eating: bool = False
    sedentary_after_meal: bool = False
    stress_eating: bool = False
    packaged_stored_long: bool = False
    mindless_eating: bool = False

    def as_dict(self) -> dict[str, object]:
        return {wire: getattr(self, attr) for attr, wire in _CONTEXT_KEYS.items()}

    @classmethod
    def from_dict(cls, row: dict[str, object] | None) -> "MealContext":
        """Build a context from camelCase keys, treating absent values as falsy."""
        row = row or {}
        body_mass = row.get("bodyMassKg")
        return cls(
            post_workout=bool(row.get("postWorkout")),
            body_mass_kg=float(body_mass) if body_mass else None,
            plant_diversity=int(row.get("plantDiversity") or 0),
            fermented=bool(row.get("fermented")),
            added_sugar=float(row.get("addedSugar") or 0.0),
            late_night_eating=bool(row.get("lateNightEating")),
            sedentary_after_meal=bool(row.get("sedentaryAfterMeal")),
            stress_eating=bool(row.get("stressEating")),
            packaged_stored_long=bool(row.get("packagedStoredLong")),
            mindless_eating=bool(row.get("mindlessEating")),
        )

    def active_flags(self) -> list[str]:
        """Return the wire names of boolean flags that are set."""
        return [
            wire
            for attr, wire in _CONTEXT_KEYS.items()
            if getattr(self, attr) is True
        ]


@dataclass(frozen=True)
class MealAnalysis:
    """Everything computed for a meal."""

    items: list[MealItemInput]
    totals: NutrientTotals
    badges: Badges
    mindful: MindfulScoreResult
    effects: MealEffects
    ai_insights: str | None = None
    warnings: list[str] = field(default_factory=list)
    degraded_food_ids: list[str] = field(default_factory=list)

    def as_computed(self) -> dict[str, object]:
        """Serialize the computed block persisted with a meal."""
        return {
            "totals": self.totals.as_dict(),
            "badges": self.badges.as_dict(),
            "mindfulMealScore": self.mindful.score,
            "rationale": list(self.mindful.rationale),
            "tip": self.mindful.tip,
            "effects": self.effects.as_dict(),
            "aiInsights": self.ai_insights,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class MealRecord:
    """A persisted meal."""

    id: UUID
    user_id: UUID
    logged_at: datetime
    items: list[MealItemInput]
    context: MealContext
    computed: dict[str, object]
    notes: str | None = None

    def as_dict(self) -> dict[str, object]:
        return {
            "id": str(self.id),
            "userId": str(self.user_id),
            "loggedAt": self.logged_at.isoformat(),
            "items": [item.as_dict() for item in self.items],
            "context": self.context.as_dict(),
            "notes": self.notes,
            "computed": self.computed,
        }


@dataclass(frozen=True)
class MealPage:
    """One page of a user's meals and the total matching the filter."""

    meals: list[MealRecord]
    total: int
