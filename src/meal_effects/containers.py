"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from meal_effects.adapters.openai_reasoning_client import OpenAIReasoningClient
from meal_effects.adapters.openfoodfacts_client import HttpxOpenFoodFactsClient
from meal_effects.adapters.supabase_food_catalog import SupabaseFoodCatalog
from meal_effects.adapters.supabase_meal_repository import SupabaseMealRepository
from meal_effects.adapters.usda_client import HttpxUsdaClient
from meal_effects.config import Settings
from meal_effects.services.augmentation import EffectsAugmenter
from meal_effects.services.cache import InMemoryCache
from meal_effects.services.food_resolver import FoodResolver
from meal_effects.services.meals import MealAnalysisService, MealService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    food_resolver: FoodResolver
    augmenter: EffectsAugmenter
    meal_analysis_service: MealAnalysisService
    meal_service: MealService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    catalog = SupabaseFoodCatalog(supabase_client)
    meal_repository = SupabaseMealRepository(supabase_client)

    usda_client = None
    if resolved_settings.usda_api_key:
        usda_client = HttpxUsdaClient.create(
            api_key=resolved_settings.usda_api_key,
            base_url=resolved_settings.usda_base_url,
            timeout_seconds=resolved_settings.external_timeout_seconds,
        )
    off_client = HttpxOpenFoodFactsClient.create(
        base_url=resolved_settings.openfoodfacts_base_url,
        timeout_seconds=resolved_settings.external_timeout_seconds,
    )
    food_resolver = FoodResolver(
        catalog=catalog,
        cache=InMemoryCache(),
        usda_client=usda_client,
        off_client=off_client,
        food_ttl_seconds=resolved_settings.food_cache_ttl_seconds,
        timeout_seconds=resolved_settings.external_timeout_seconds,
    )

    reasoning_client = None
    if resolved_settings.openai_api_key:
        reasoning_client = OpenAIReasoningClient.create(
            resolved_settings.openai_api_key
        )
    augmenter = EffectsAugmenter(
        client=reasoning_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
        enabled=resolved_settings.ai_enabled,
        timeout_seconds=resolved_settings.ai_timeout_seconds,
    )
    analysis_service = MealAnalysisService(resolver=food_resolver, augmenter=augmenter)
    meal_service = MealService(
        analysis_service=analysis_service,
        repository=meal_repository,
    )

    async def close_resources() -> None:
        if usda_client is not None:
            await usda_client.close()
        await off_client.close()
        if reasoning_client is not None:
            await reasoning_client.close()

    return AppContainer(
        settings=resolved_settings,
        food_resolver=food_resolver,
        augmenter=augmenter,
        meal_analysis_service=analysis_service,
        meal_service=meal_service,
        close_resources=close_resources,
    )
