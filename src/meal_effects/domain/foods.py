"""Food and nutrient domain models."""

from dataclasses import dataclass, field, fields
from enum import StrEnum

PLACEHOLDER_NAME = "Unknown External Food"


class Fodmap(StrEnum):
    """FODMAP rating of a food."""

    UNKNOWN = "Unknown"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


FODMAP_SEVERITY: dict[Fodmap, int] = {
    Fodmap.UNKNOWN: 0,
    Fodmap.LOW: 1,
    Fodmap.MEDIUM: 2,
    Fodmap.HIGH: 3,
}


class FoodSource(StrEnum):
    """Where a nutrient profile came from."""

    LOCAL = "local"
    USDA = "usda"
    OPENFOODFACTS = "openfoodfacts"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class NutrientTotals:
    """Nutrient amounts: per 100 g for a profile, absolute for a meal."""

    kcal: float = 0.0
    protein: float = 0.0
    fat: float = 0.0
    carbs: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0
    vitamin_c: float = 0.0
    zinc: float = 0.0
    selenium: float = 0.0
    iron: float = 0.0
    omega3: float = 0.0

    @classmethod
    def zero(cls) -> "NutrientTotals":
        """Return all-zero totals."""
        return cls()

    def is_empty(self) -> bool:
        """Return True when every nutrient is zero."""
        return all(getattr(self, name) == 0 for name in NUTRIENT_FIELDS)

    def __add__(self, other: "NutrientTotals") -> "NutrientTotals":
        if not isinstance(other, NutrientTotals):
            return NotImplemented
        return NutrientTotals(
            **{
                name: round(getattr(self, name) + getattr(other, name), 2)
                for name in NUTRIENT_FIELDS
            }
        )

    def as_dict(self) -> dict[str, float]:
        """Serialize using the persisted camelCase keys."""
        return {
            WIRE_KEYS[name]: getattr(self, name) for name in NUTRIENT_FIELDS
        }


NUTRIENT_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(NutrientTotals))

WIRE_KEYS: dict[str, str] = {name: name for name in NUTRIENT_FIELDS} | {
    "vitamin_c": "vitaminC"
}


@dataclass(frozen=True)
class FoodNutrientProfile:
    """Canonical per-100g nutrient profile for one food."""

    food_id: str
    name: str
    source: FoodSource
    nutrients: NutrientTotals = field(default_factory=NutrientTotals)
    gi: int | None = None
    fodmap: Fodmap = Fodmap.UNKNOWN
    nova_class: int = 1
    tags: frozenset[str] = frozenset()

    @classmethod
    def placeholder(cls, food_id: str) -> "FoodNutrientProfile":
        """Zero-valued profile used when a food could not be resolved."""
        return cls(
            food_id=food_id,
            name=PLACEHOLDER_NAME,
            source=FoodSource.PLACEHOLDER,
        )


@dataclass(frozen=True)
class Resolved:
    """A food whose profile was fetched successfully."""

    profile: FoodNutrientProfile

    @property
    def is_degraded(self) -> bool:
        return False


@dataclass(frozen=True)
class Degraded:
    """A food that fell back to the zero placeholder."""

    profile: FoodNutrientProfile
    reason: str

    @property
    def is_degraded(self) -> bool:
        return True


ResolutionOutcome = Resolved | Degraded
