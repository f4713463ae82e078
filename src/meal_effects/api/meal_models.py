"""Pydantic models for meal API payloads."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from meal_effects.domain.meals import MealContext, MealItemInput


class MealItemModel(BaseModel):
    """Meal item payload.

    Range checks on grams happen in the service so they map to HTTP 400.
    """

    model_config = ConfigDict(populate_by_name=True)

    food_id: str = Field(alias="foodId")
    grams: float
    custom_name: str | None = Field(default=None, alias="customName")

    def to_domain(self) -> MealItemInput:
        return MealItemInput(
            food_id=self.food_id, grams=self.grams, custom_name=self.custom_name
        )


class MealContextModel(BaseModel):
    """Meal context payload."""

    model_config = ConfigDict(populate_by_name=True)

    post_workout: bool | None = Field(default=None, alias="postWorkout")
    body_mass_kg: float | None = Field(default=None, gt=0, alias="bodyMassKg")
    plant_diversity: int | None = Field(default=None, ge=0, alias="plantDiversity")
    fermented: bool | None = None
    added_sugar: float | None = Field(default=None, ge=0, alias="addedSugar")
    late_night_eating: bool | None = Field(default=None, alias="lateNightEating")
    sedentary_after_meal: bool | None = Field(
        default=None, alias="sedentaryAfterMeal"
    )
    stress_eating: bool | None = Field(default=None, alias="stressEating")
    packaged_stored_long: bool | None = Field(
        default=None, alias="packagedStoredLong"
    )
    mindless_eating: bool | None = Field(default=None, alias="mindlessEating")

    def updates(self) -> dict[str, object]:
        """Return the fields that were sent, keyed by their wire names."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_domain(self) -> MealContext:
        return MealContext.from_dict(self.updates())


class MealCreateModel(BaseModel):
    """Body of a meal create or preview request."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[MealItemModel] = Field(default_factory=list)
    context: MealContextModel | None = None
    notes: str | None = None
    logged_at: datetime | None = Field(default=None, alias="loggedAt")
    skip_ai: bool = Field(default=False, alias="skipAI")
    user_profile: dict[str, Any] | None = Field(default=None, alias="userProfile")


class MealUpdateModel(BaseModel):
    """Body of a meal update request; absent fields are left unchanged."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[MealItemModel] | None = None
    context: MealContextModel | None = None
    notes: str | None = None
    skip_ai: bool = Field(default=False, alias="skipAI")
    user_profile: dict[str, Any] | None = Field(default=None, alias="userProfile")
