"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

import pytest

from meal_effects.adapters.openfoodfacts_client import OpenFoodFactsClient
from meal_effects.adapters.usda_client import UsdaClient
from meal_effects.config import Settings
from meal_effects.containers import AppContainer
from meal_effects.domain.foods import (
    Fodmap,
    FoodNutrientProfile,
    FoodSource,
    NutrientTotals,
)
from meal_effects.domain.meals import MealContext, MealItemInput, MealPage, MealRecord
from meal_effects.services.augmentation import EffectsAugmenter, ReasoningClient
from meal_effects.services.cache import InMemoryCache
from meal_effects.services.food_resolver import FoodCatalog, FoodResolver
from meal_effects.services.meals import (
    MealAnalysisService,
    MealRepository,
    MealService,
)

CHICKEN_ID = "11111111-1111-4111-8111-111111111111"
SPINACH_ID = "22222222-2222-4222-8222-222222222222"
RICE_ID = "33333333-3333-4333-8333-333333333333"
COLA_ID = "44444444-4444-4444-8444-444444444444"
SALMON_ID = "55555555-5555-4555-8555-555555555555"


def make_profile(  # noqa: PLR0913
    food_id: str,
    name: str = "Test Food",
    *,
    gi: int | None = None,
    fodmap: Fodmap = Fodmap.UNKNOWN,
    nova_class: int = 1,
    tags: tuple[str, ...] = (),
    source: FoodSource = FoodSource.LOCAL,
    **nutrients: float,
) -> FoodNutrientProfile:
    return FoodNutrientProfile(
        food_id=food_id,
        name=name,
        source=source,
        nutrients=NutrientTotals(**nutrients),
        gi=gi,
        fodmap=fodmap,
        nova_class=nova_class,
        tags=frozenset(tags),
    )


def default_foods() -> dict[str, FoodNutrientProfile]:
    return {
        CHICKEN_ID: make_profile(
            CHICKEN_ID,
            "Chicken breast",
            fodmap=Fodmap.LOW,
            kcal=165,
            protein=31,
            fat=3.6,
            iron=1.0,
            zinc=1.0,
            selenium=27,
        ),
        SPINACH_ID: make_profile(
            SPINACH_ID,
            "Spinach",
            gi=15,
            fodmap=Fodmap.LOW,
            tags=("veg", "leafy"),
            kcal=23,
            protein=2.9,
            fat=0.4,
            carbs=3.6,
            fiber=2.2,
            sugar=0.4,
            vitamin_c=28,
            iron=2.7,
        ),
        RICE_ID: make_profile(
            RICE_ID,
            "White rice",
            gi=73,
            fodmap=Fodmap.LOW,
            kcal=130,
            protein=2.7,
            fat=0.3,
            carbs=28,
            fiber=0.4,
        ),
        COLA_ID: make_profile(
            COLA_ID,
            "Cola",
            gi=63,
            fodmap=Fodmap.HIGH,
            nova_class=4,
            kcal=140,
            carbs=35,
            sugar=35,
        ),
        SALMON_ID: make_profile(
            SALMON_ID,
            "Salmon",
            kcal=208,
            protein=20,
            fat=13,
            omega3=2.3,
            selenium=36,
        ),
    }


@dataclass
class InMemoryFoodCatalog(FoodCatalog):
    """In-memory food catalog for tests."""

    foods: dict[str, FoodNutrientProfile] = field(default_factory=default_foods)
    calls: list[list[str]] = field(default_factory=list)
    error: Exception | None = None

    def get_foods(self, food_ids: list[str]) -> list[FoodNutrientProfile]:
        self.calls.append(list(food_ids))
        if self.error is not None:
            raise self.error
        return [self.foods[food_id] for food_id in food_ids if food_id in self.foods]


@dataclass
class FakeUsdaClient(UsdaClient):
    """Fake USDA client serving canned payloads."""

    payloads: dict[str, dict[str, object]] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)
    error: Exception | None = None
    delay_seconds: float = 0.0
    delays: dict[str, float] = field(default_factory=dict)

    async def get_food(self, fdc_id: str) -> dict[str, object]:
        self.calls.append(fdc_id)
        delay = self.delays.get(fdc_id, self.delay_seconds)
        if delay:
            await asyncio.sleep(delay)
        if self.error is not None:
            raise self.error
        return self.payloads.get(fdc_id, {})


@dataclass
class FakeOffClient(OpenFoodFactsClient):
    """Fake Open Food Facts client serving canned payloads."""

    payloads: dict[str, dict[str, object]] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)
    error: Exception | None = None

    async def get_product(self, code: str) -> dict[str, object]:
        self.calls.append(code)
        if self.error is not None:
            raise self.error
        return self.payloads.get(code, {"status": 0})


@dataclass
class FakeReasoningClient(ReasoningClient):
    """Fake reasoning client returning a canned reply."""

    reply: str = "{}"
    error: Exception | None = None
    delay_seconds: float = 0.0
    prompts: list[str] = field(default_factory=list)

    async def analyze(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        system_prompt: str,
        prompt: str,
    ) -> str:
        self.prompts.append(prompt)
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.error is not None:
            raise self.error
        return self.reply


@dataclass
class InMemoryMealRepository(MealRepository):
    """In-memory meal repository for tests."""

    meals: dict[UUID, MealRecord] = field(default_factory=dict)
    writes: list[str] = field(default_factory=list)

    def create_meal(  # noqa: PLR0913
        self,
        user_id: UUID,
        logged_at: datetime,
        items: list[MealItemInput],
        context: MealContext,
        computed: dict[str, object],
        notes: str | None,
    ) -> MealRecord:
        record = MealRecord(
            id=uuid4(),
            user_id=user_id,
            logged_at=logged_at,
            items=list(items),
            context=context,
            computed=computed,
            notes=notes,
        )
        self.meals[record.id] = record
        self.writes.append("create")
        return record

    def get_meal(self, meal_id: UUID) -> MealRecord | None:
        return self.meals.get(meal_id)

    def update_meal(
        self,
        meal_id: UUID,
        *,
        items: list[MealItemInput],
        context: MealContext,
        computed: dict[str, object],
        notes: str | None,
    ) -> MealRecord:
        stored = self.meals[meal_id]
        record = MealRecord(
            id=stored.id,
            user_id=stored.user_id,
            logged_at=stored.logged_at,
            items=list(items),
            context=context,
            computed=computed,
            notes=notes,
        )
        self.meals[meal_id] = record
        self.writes.append("update")
        return record

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
        matching = sorted(
            (
                meal
                for meal in self.meals.values()
                if meal.user_id == user_id
                and (start is None or meal.logged_at >= start)
                and (end is None or meal.logged_at < end)
            ),
            key=lambda meal: meal.logged_at,
            reverse=descending,
        )
        stop = None if limit is None else offset + limit
        return MealPage(meals=matching[offset:stop], total=len(matching))

    def delete_meal(self, meal_id: UUID, user_id: UUID) -> bool:
        stored = self.meals.get(meal_id)
        if stored is None or stored.user_id != user_id:
            return False
        del self.meals[meal_id]
        self.writes.append("delete")
        return True


def build_resolver(
    catalog: FoodCatalog | None = None,
    usda_client: UsdaClient | None = None,
    off_client: OpenFoodFactsClient | None = None,
    timeout_seconds: float = 3.0,
) -> FoodResolver:
    return FoodResolver(
        catalog=catalog or InMemoryFoodCatalog(),
        cache=InMemoryCache(),
        usda_client=usda_client,
        off_client=off_client,
        timeout_seconds=timeout_seconds,
        retry_delay_seconds=0.0,
    )


def build_augmenter(
    client: ReasoningClient | None = None,
    *,
    enabled: bool = True,
    timeout_seconds: float = 5.0,
) -> EffectsAugmenter:
    return EffectsAugmenter(
        client=client,
        model="gpt-5.2",
        reasoning_effort="low",
        enabled=enabled,
        timeout_seconds=timeout_seconds,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        api_token="api-token",
        openai_api_key="openai-key",
        usda_api_key="usda-key",
    )


@pytest.fixture
def food_catalog() -> InMemoryFoodCatalog:
    return InMemoryFoodCatalog()


@pytest.fixture
def reasoning_client() -> FakeReasoningClient:
    return FakeReasoningClient()


@pytest.fixture
def meal_repository() -> InMemoryMealRepository:
    return InMemoryMealRepository()


@pytest.fixture
def meal_service(
    food_catalog: InMemoryFoodCatalog,
    reasoning_client: FakeReasoningClient,
    meal_repository: InMemoryMealRepository,
) -> MealService:
    analysis_service = MealAnalysisService(
        resolver=build_resolver(food_catalog, off_client=FakeOffClient()),
        augmenter=build_augmenter(reasoning_client),
    )
    return MealService(analysis_service=analysis_service, repository=meal_repository)


@pytest.fixture
def container(settings: Settings, meal_service: MealService) -> AppContainer:
    async def close_resources() -> None:
        return None

    analysis_service = meal_service.analysis_service
    return AppContainer(
        settings=settings,
        food_resolver=analysis_service.resolver,
        augmenter=analysis_service.augmenter,
        meal_analysis_service=analysis_service,
        meal_service=meal_service,
        close_resources=close_resources,
    )
