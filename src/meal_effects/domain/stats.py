"""Domain models for meal statistics."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MealStats:
    """Averages and badge counts over a set of meals."""

    total_meals: int
    average_score: float
    average_calories: float
    average_protein: float
    average_fiber: float
    protein_meals: int
    veg_meals: int
    high_nova_meals: int

    def as_dict(self) -> dict[str, object]:
        return {
            "totalMeals": self.total_meals,
            "averageScore": self.average_score,
            "averageCalories": self.average_calories,
            "averageProtein": self.average_protein,
            "averageFiber": self.average_fiber,
            "proteinMeals": self.protein_meals,
            "vegMeals": self.veg_meals,
            "highNovaMeals": self.high_nova_meals,
        }
