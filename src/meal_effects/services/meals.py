"""Meal analysis and persistence services."""

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any, Protocol
from uuid import UUID

from meal_effects.domain.effects import Badges
from meal_effects.domain.meals import (
    MAX_ITEM_GRAMS,
    MealAnalysis,
    MealContext,
    MealItemInput,
    MealPage,
    MealRecord,
)
from meal_effects.domain.stats import MealStats
from meal_effects.services.aggregate import aggregate, countable, nutrient_warnings
from meal_effects.services.augmentation import EffectsAugmenter, MealSummary
from meal_effects.services.badges import infer_badges
from meal_effects.services.effects import compute_effects
from meal_effects.services.food_resolver import FoodResolver
from meal_effects.services.mindful_score import score_meal
from meal_effects.services.stats import summarize_meals

_logger = logging.getLogger(__name__)


class MealInputError(ValueError):
    """Raised when a meal request cannot be analyzed."""


class MealRepository(Protocol):
    """Persistence interface for meals."""

    def create_meal(  # noqa: PLR0913
        self,
        user_id: UUID,
        logged_at: datetime,
        items: list[MealItemInput],
        context: MealContext,
        computed: dict[str, object],
        notes: str | None,
    ) -> MealRecord:
        """Create a meal and return the stored record."""

    def get_meal(self, meal_id: UUID) -> MealRecord | None:
        """Return a meal by id."""

    def update_meal(
        self,
        meal_id: UUID,
        *,
        items: list[MealItemInput],
        context: MealContext,
        computed: dict[str, object],
        notes: str | None,
    ) -> MealRecord:
        """Replace a meal's items, context, notes and computed block."""

    def list_meals(  # noqa: PLR0913
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
        *,
        limit: int | None = None,
        offset: int = 0,
        descending: bool = True,
    ) -> MealPage:
        """Return a user's meals logged in [start, end), ordered by time."""

    def delete_meal(self, meal_id: UUID, user_id: UUID) -> bool:
        """Delete a user's meal and report whether it existed."""


@dataclass(frozen=True)
class MealRequest:
    """A meal submitted for analysis."""

    items: list[MealItemInput]
    context: MealContext = field(default_factory=MealContext)
    notes: str | None = None
    logged_at: datetime | None = None
    skip_ai: bool = False
    user_profile: dict[str, Any] | None = None


def validate_items(items: list[MealItemInput]) -> None:
    """Reject requests that cannot describe a meal."""
    if not items:
        raise MealInputError("Meal must contain at least one item")
    for index, item in enumerate(items):
        if not item.food_id or not item.food_id.strip():
            raise MealInputError(f"Item {index} is missing a food id")
        grams = item.grams
        if not math.isfinite(grams) or grams <= 0 or grams > MAX_ITEM_GRAMS:
            raise MealInputError(
                f"Item {index} grams must be greater than 0 and at most "
                f"{MAX_ITEM_GRAMS:g}"
            )


@dataclass
class MealAnalysisService:
    """Runs the scoring pipeline for a list of items."""

    resolver: FoodResolver
    augmenter: EffectsAugmenter

    async def analyze(
        self,
        items: list[MealItemInput],
        context: MealContext | None = None,
        *,
        skip_ai: bool = False,
        user_profile: dict[str, Any] | None = None,
    ) -> MealAnalysis:
        """Resolve, aggregate, badge, score and refine a meal."""
        context = context or MealContext()
        outcomes = await self.resolver.resolve(item.food_id for item in items)
        profiles = [outcomes[item.food_id].profile for item in items]

        pairs = countable(zip(profiles, (item.grams for item in items), strict=True))
        totals = aggregate(pairs)
        badges = Badges.empty() if not pairs else infer_badges(totals, pairs)
        mindful = score_meal(totals, badges, context)
        rule_based = compute_effects(totals, badges, context)

        summary = MealSummary(
            items=[
                (item.custom_name or profile.name, item.grams)
                for item, profile in zip(items, profiles, strict=True)
            ],
            totals=totals,
            badges=badges,
            context=context,
        )
        augmentation = await self.augmenter.merge(
            summary, user_profile, rule_based, skip=skip_ai
        )

        degraded = [
            food_id for food_id, outcome in outcomes.items() if outcome.is_degraded
        ]
        warnings = nutrient_warnings(totals)
        warnings += [f"Nutrition data unavailable for food {food_id}" for food_id in degraded]
        named_items = [
            item
            if item.custom_name or outcomes[item.food_id].is_degraded
            else replace(item, custom_name=profile.name)
            for item, profile in zip(items, profiles, strict=True)
        ]
        return MealAnalysis(
            items=named_items,
            totals=totals,
            badges=badges,
            mindful=mindful,
            effects=augmentation.effects,
            ai_insights=augmentation.ai_insights,
            warnings=warnings,
            degraded_food_ids=degraded,
        )


@dataclass
class MealService:
    """Validates, analyzes and persists meals."""

    analysis_service: MealAnalysisService
    repository: MealRepository

    async def preview(self, request: MealRequest) -> MealAnalysis:
        """Analyze a meal without persisting it."""
        validate_items(request.items)
        return await self._analyze(request)

    async def create_meal(self, user_id: UUID, request: MealRequest) -> MealRecord:
        """Analyze a meal and persist it with its computed block."""
        validate_items(request.items)
        analysis = await self._analyze(request)
        record = self.repository.create_meal(
            user_id=user_id,
            logged_at=request.logged_at or datetime.now(tz=UTC),
            items=analysis.items,
            context=request.context,
            computed=analysis.as_computed(),
            notes=request.notes,
        )
        _logger.info("Created meal %s for user %s", record.id, user_id)
        return record

    def get_meal(self, meal_id: UUID) -> MealRecord | None:
        """Return a stored meal."""
        return self.repository.get_meal(meal_id)

    async def recompute_meal(  # noqa: PLR0913
        self,
        meal_id: UUID,
        *,
        items: list[MealItemInput] | None = None,
        context: dict[str, object] | None = None,
        notes: str | None = None,
        skip_ai: bool = False,
        user_profile: dict[str, Any] | None = None,
    ) -> MealRecord | None:
        """Apply changes to a stored meal, recomputing it when inputs change.

        Context updates are merged over the stored context.
        """
        stored = self.repository.get_meal(meal_id)
        if stored is None:
            return None

        new_items = stored.items
        if items is not None:
            validate_items(items)
            new_items = items
        new_context = stored.context
        if context is not None:
            merged = stored.context.as_dict()
            merged.update({key: value for key, value in context.items() if value is not None})
            new_context = MealContext.from_dict(merged)

        computed = stored.computed
        if items is not None or context is not None:
            analysis = await self.analysis_service.analyze(
                new_items,
                new_context,
                skip_ai=skip_ai,
                user_profile=user_profile,
            )
            computed = analysis.as_computed()
            new_items = analysis.items
            _logger.info("Recomputed meal %s", meal_id)

        return self.repository.update_meal(
            meal_id,
            items=new_items,
            context=new_context,
            computed=computed,
            notes=notes if notes is not None else stored.notes,
        )

    def list_meals(  # noqa: PLR0913
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
        *,
        limit: int = 50,
        page: int = 1,
        descending: bool = True,
    ) -> MealPage:
        """Return one page of a user's meals, newest first by default."""
        if limit < 1 or page < 1:
            raise MealInputError("limit and page must be positive")
        return self.repository.list_meals(
            user_id,
            start,
            end,
            limit=limit,
            offset=(page - 1) * limit,
            descending=descending,
        )

    def stats(
        self, user_id: UUID, start: datetime | None = None, end: datetime | None = None
    ) -> MealStats:
        """Summarize the stored analyses of a user's meals in a time range."""
        page = self.repository.list_meals(user_id, start, end)
        return summarize_meals(page.meals)

    def delete_meal(self, meal_id: UUID, user_id: UUID) -> bool:
        """Delete a user's meal; returns False when no such meal exists."""
        deleted = self.repository.delete_meal(meal_id, user_id)
        if deleted:
            _logger.info("Deleted meal %s for user %s", meal_id, user_id)
        return deleted

    async def _analyze(self, request: MealRequest) -> MealAnalysis:
        return await self.analysis_service.analyze(
            request.items,
            request.context,
            skip_ai=request.skip_ai,
            user_profile=request.user_profile,
        )
