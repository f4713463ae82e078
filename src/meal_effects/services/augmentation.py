"""Optional LLM refinement of rule-based meal effects."""

import asyncio
import json
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from meal_effects.domain.effects import EFFECT_KEYS, Badges, EffectResult, MealEffects
from meal_effects.domain.foods import NutrientTotals
from meal_effects.domain.meals import MealContext
from meal_effects.services.effects import clamp_score

SYSTEM_PROMPT = (
    "You are a nutrition and health expert specializing in meal analysis. "
    "Analyze the provided meal data and provide accurate health effect scores "
    "(0-10) with detailed explanations.\n\n"
    "Respond with a single JSON object. Use any of these keys: "
    f"{', '.join(EFFECT_KEYS)}. Each value is an object with "
    '"score" (0-10), "label", "why" (list of short reasons) and an optional '
    '"aiInsights" string. You may add a top-level "aiInsights" string with an '
    "overall comment on the meal. Omit effects you agree with."
)

_JSON_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)

_logger = logging.getLogger(__name__)


class ReasoningClient(Protocol):
    """Interface for a text reasoning service."""

    async def analyze(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        system_prompt: str,
        prompt: str,
    ) -> str:
        """Return the raw text reply for a prompt."""


class EffectOverride(BaseModel):
    """Fields a reasoning reply may override on one effect.

    Fields that fail validation are dropped rather than failing the override.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    score: float | None = Field(default=None, allow_inf_nan=False)
    label: str | None = None
    why: list[str] | None = None
    ai_insights: str | None = Field(default=None, alias="aiInsights")

    @field_validator("*", mode="wrap")
    @classmethod
    def _drop_invalid(cls, value: Any, handler: Any) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return None

    def apply(self, base: EffectResult) -> EffectResult:
        """Spread this override over a rule-based result."""
        return EffectResult(
            score=clamp_score(self.score) if self.score is not None else base.score,
            label=self.label if self.label is not None else base.label,
            why=tuple(self.why) if self.why is not None else base.why,
            ai_insights=(
                self.ai_insights if self.ai_insights is not None else base.ai_insights
            ),
            ai_enhanced=True,
        )


@dataclass(frozen=True)
class MealSummary:
    """What the reasoning service is told about a meal."""

    items: Sequence[tuple[str, float]]
    totals: NutrientTotals
    badges: Badges
    context: MealContext = field(default_factory=MealContext)


@dataclass(frozen=True)
class EffectsAugmentation:
    """Effects after optional refinement."""

    effects: MealEffects
    ai_insights: str | None = None
    ai_enhanced: bool = False


@dataclass
class EffectsAugmenter:
    """Merges reasoning-service overrides into rule-based effects.

    Any failure falls back to the rule-based effects unchanged.
    """

    client: ReasoningClient | None
    model: str
    reasoning_effort: str | None = None
    store: bool = False
    enabled: bool = True
    timeout_seconds: float = 20.0

    async def merge(
        self,
        meal: MealSummary,
        user_profile: dict[str, Any] | None,
        rule_based: MealEffects,
        *,
        skip: bool = False,
    ) -> EffectsAugmentation:
        """Refine rule-based effects, or return them untouched."""
        fallback = EffectsAugmentation(effects=rule_based)
        if not self.enabled or skip:
            _logger.info("AI augmentation skipped (enabled=%s, skip=%s)", self.enabled, skip)
            return fallback
        if self.client is None:
            _logger.info("AI augmentation skipped: no reasoning client configured")
            return fallback

        prompt = build_prompt(meal, user_profile, rule_based)
        try:
            reply = await asyncio.wait_for(
                self.client.analyze(
                    model=self.model,
                    reasoning_effort=self.reasoning_effort,
                    store=self.store,
                    system_prompt=SYSTEM_PROMPT,
                    prompt=prompt,
                ),
                self.timeout_seconds,
            )
        except TimeoutError:
            _logger.warning(
                "AI augmentation timed out after %ss; using rule-based effects",
                self.timeout_seconds,
            )
            return fallback
        except Exception:
            _logger.exception("AI augmentation failed; using rule-based effects")
            return fallback

        payload = parse_reply(reply)
        if payload is None:
            _logger.warning("AI reply had no JSON object; using rule-based effects")
            return fallback

        overrides: dict[str, EffectResult] = {}
        for key in EFFECT_KEYS:
            raw = payload.get(key)
            if not isinstance(raw, dict):
                continue
            override = EffectOverride.model_validate(raw)
            overrides[key] = override.apply(rule_based.get(key))

        insights = payload.get("aiInsights")
        return EffectsAugmentation(
            effects=rule_based.replace(overrides) if overrides else rule_based,
            ai_insights=insights if isinstance(insights, str) else None,
            ai_enhanced=bool(overrides),
        )


def parse_reply(reply: str | None) -> dict[str, Any] | None:
    """Decode the first ``{...}`` span of a reply, if any."""
    if not reply:
        return None
    match = _JSON_OBJECT_PATTERN.search(reply)
    if match is None:
        return None
    try:
        payload = json.loads(match.group(0))
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


def build_prompt(
    meal: MealSummary,
    user_profile: dict[str, Any] | None,
    rule_based: MealEffects,
) -> str:
    """Describe the meal, its context and the current scores."""
    lines = ["Analyze this meal for health effects:", "", "MEAL ITEMS:"]
    for index, (name, grams) in enumerate(meal.items, start=1):
        lines.append(f"{index}. {name} ({grams:g}g)")

    totals = meal.totals
    lines += [
        "",
        "NUTRITIONAL TOTALS:",
        f"- Calories: {totals.kcal:g} kcal",
        f"- Protein: {totals.protein:g}g",
        f"- Carbs: {totals.carbs:g}g",
        f"- Fat: {totals.fat:g}g",
        f"- Fiber: {totals.fiber:g}g",
        f"- Sugar: {totals.sugar:g}g",
        f"- Vitamin C: {totals.vitamin_c:g}mg",
        f"- Iron: {totals.iron:g}mg",
        f"- Omega-3: {totals.omega3:g}g",
        "",
        "BADGES:",
        f"- High protein: {'yes' if meal.badges.protein else 'no'}",
        f"- Vegetables: {'yes' if meal.badges.veg else 'no'}",
        f"- Glycemic index: {meal.badges.gi if meal.badges.gi is not None else 'unknown'}",
        f"- FODMAP: {meal.badges.fodmap.value}",
        f"- NOVA: {meal.badges.nova}",
    ]

    context_lines = [f"- {flag}" for flag in meal.context.active_flags()]
    if meal.context.plant_diversity:
        context_lines.append(f"- Plant diversity: {meal.context.plant_diversity} types")
    if meal.context.added_sugar:
        context_lines.append(f"- Added sugar: {meal.context.added_sugar:g}g")
    if context_lines:
        lines += ["", "MEAL CONTEXT:", *context_lines]

    profile_lines = _profile_lines(user_profile or {})
    if profile_lines:
        lines += ["", "USER PROFILE:", *profile_lines]

    lines += ["", "CURRENT RULE-BASED SCORES:"]
    for key, effect in rule_based.items():
        lines.append(f"- {key}: {effect.score:g}/10 ({effect.label})")
    lines += [
        "",
        "Please provide enhanced analysis with more accurate scores and "
        "detailed explanations.",
    ]
    return "\n".join(lines)


def _profile_lines(profile: dict[str, Any]) -> list[str]:
    lines: list[str] = []
    if profile.get("age"):
        lines.append(f"- Age: {profile['age']}")
    if profile.get("activityLevel"):
        lines.append(f"- Activity Level: {profile['activityLevel']}")
    if profile.get("healthGoals"):
        lines.append(f"- Health Goals: {profile['healthGoals']}")
    conditions = profile.get("medicalConditions")
    if isinstance(conditions, list) and conditions:
        lines.append(f"- Medical Conditions: {', '.join(map(str, conditions))}")
    return lines
