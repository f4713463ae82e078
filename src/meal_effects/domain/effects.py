"""Domain models for badges, mindful scores and health effects."""

from dataclasses import dataclass
from enum import StrEnum

from meal_effects.domain.foods import Fodmap

EFFECT_KEYS: tuple[str, ...] = (
    "fatForming",
    "strength",
    "immunity",
    "inflammation",
    "antiInflammatory",
    "energizing",
    "gutFriendly",
    "moodLifting",
)

_EFFECT_ATTRS: dict[str, str] = {
    "fatForming": "fat_forming",
    "strength": "strength",
    "immunity": "immunity",
    "inflammation": "inflammation",
    "antiInflammatory": "anti_inflammatory",
    "energizing": "energizing",
    "gutFriendly": "gut_friendly",
    "moodLifting": "mood_lifting",
}


@dataclass(frozen=True)
class Badges:
    """Qualitative signals derived from a meal."""

    protein: bool
    veg: bool
    gi: int | None
    fodmap: Fodmap
    nova: int

    @classmethod
    def empty(cls) -> "Badges":
        """Badges for a meal with no usable data."""
        return cls(protein=False, veg=False, gi=None, fodmap=Fodmap.UNKNOWN, nova=1)

    def as_dict(self) -> dict[str, object]:
        return {
            "protein": self.protein,
            "veg": self.veg,
            "gi": self.gi,
            "fodmap": self.fodmap.value,
            "nova": self.nova,
        }


class MealQuality(StrEnum):
    """Quality band of a mindful meal score."""

    EXCELLENT = "excellent"
    VERY_GOOD = "very_good"
    GOOD = "good"
    FAIR = "fair"
    NEEDS_IMPROVEMENT = "needs_improvement"
    POOR = "poor"


@dataclass(frozen=True)
class MindfulScoreResult:
    """Mindful meal score with rationale and tips."""

    score: float
    rationale: tuple[str, ...]
    tip: str
    tips: tuple[str, ...]
    quality: MealQuality

    def as_dict(self) -> dict[str, object]:
        return {
            "score": self.score,
            "rationale": list(self.rationale),
            "tip": self.tip,
            "tips": list(self.tips),
            "quality": self.quality.value,
        }


@dataclass(frozen=True)
class EffectResult:
    """One health-effect score with its contributing reasons."""

    score: float
    label: str
    why: tuple[str, ...]
    ai_insights: str | None = None
    ai_enhanced: bool = False

    def as_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "score": self.score,
            "label": self.label,
            "why": list(self.why),
        }
        if self.ai_insights is not None:
            payload["aiInsights"] = self.ai_insights
        if self.ai_enhanced:
            payload["aiEnhanced"] = True
        return payload


@dataclass(frozen=True)
class MealEffects:
    """The eight health effects of a meal."""

    fat_forming: EffectResult
    strength: EffectResult
    immunity: EffectResult
    inflammation: EffectResult
    anti_inflammatory: EffectResult
    energizing: EffectResult
    gut_friendly: EffectResult
    mood_lifting: EffectResult

    def get(self, key: str) -> EffectResult:
        """Return an effect by its wire key, e.g. ``fatForming``."""
        return getattr(self, _EFFECT_ATTRS[key])

    def items(self) -> list[tuple[str, EffectResult]]:
        return [(key, self.get(key)) for key in EFFECT_KEYS]

    def replace(self, overrides: dict[str, EffectResult]) -> "MealEffects":
        """Return a copy with the given wire keys replaced."""
        values = {_EFFECT_ATTRS[key]: self.get(key) for key in EFFECT_KEYS}
        for key, effect in overrides.items():
            values[_EFFECT_ATTRS[key]] = effect
        return MealEffects(**values)

    def as_dict(self) -> dict[str, dict[str, object]]:
        return {key: effect.as_dict() for key, effect in self.items()}
