"""Resolve food ids into nutrient profiles from the catalog or external providers."""

import asyncio
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from meal_effects.adapters.openfoodfacts_client import OpenFoodFactsClient
from meal_effects.adapters.usda_client import UsdaClient
from meal_effects.domain.foods import (
    Degraded,
    FoodNutrientProfile,
    FoodSource,
    ResolutionOutcome,
    Resolved,
)
from meal_effects.services.cache import Cache
from meal_effects.services.normalization import normalize_openfoodfacts, normalize_usda

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

USDA_PREFIX = "usda_"
OFF_PREFIX = "off_"

_LOCAL_ID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

_logger = logging.getLogger(__name__)


class FoodCatalog(Protocol):
    """Lookup interface for the local food catalog."""

    def get_foods(self, food_ids: list[str]) -> list[FoodNutrientProfile]:
        """Return catalog foods for the given ids in one batched query."""


def is_local_id(food_id: str) -> bool:
    """Return True when the id has the catalog's primary-key format."""
    return bool(_LOCAL_ID_PATTERN.match(food_id))


def external_source(food_id: str) -> FoodSource | None:
    """Return the provider an external id is tagged with, if supported."""
    if food_id.startswith(USDA_PREFIX) and food_id[len(USDA_PREFIX) :]:
        return FoodSource.USDA
    if food_id.startswith(OFF_PREFIX) and food_id[len(OFF_PREFIX) :]:
        return FoodSource.OPENFOODFACTS
    return None


@dataclass
class FoodResolver:
    """Resolves food ids, degrading failed lookups to zero placeholders."""

    catalog: FoodCatalog
    cache: Cache
    usda_client: UsdaClient | None = None
    off_client: OpenFoodFactsClient | None = None
    food_ttl_seconds: int = 86400
    timeout_seconds: float = 3.0
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def resolve(self, food_ids: Iterable[str]) -> dict[str, ResolutionOutcome]:
        """Resolve every unique id.

        Local ids are fetched in one catalog query; external ids are fetched
        concurrently, one call per unique id. Never raises for a single
        failed food.
        """
        unique_ids = list(dict.fromkeys(food_ids))
        local_ids = [food_id for food_id in unique_ids if is_local_id(food_id)]
        external_ids = [food_id for food_id in unique_ids if not is_local_id(food_id)]

        outcomes = self._resolve_local(local_ids)
        if external_ids:
            results = await asyncio.gather(
                *(self._resolve_external(food_id) for food_id in external_ids),
                return_exceptions=True,
            )
            for food_id, result in zip(external_ids, results, strict=True):
                if isinstance(result, Exception):
                    outcomes[food_id] = _degraded(food_id, f"lookup crashed: {result}")
                elif isinstance(result, BaseException):
                    raise result
                else:
                    outcomes[food_id] = result

        degraded = [food_id for food_id, o in outcomes.items() if o.is_degraded]
        _logger.info(
            "Resolved foods: local=%s external=%s degraded=%s",
            len(local_ids),
            len(external_ids),
            len(degraded),
        )
        return outcomes

    def _resolve_local(self, food_ids: list[str]) -> dict[str, ResolutionOutcome]:
        if not food_ids:
            return {}
        try:
            profiles = self.catalog.get_foods(food_ids)
        except Exception:
            _logger.exception("Food catalog lookup failed for %s ids", len(food_ids))
            return {
                food_id: _degraded(food_id, "catalog unavailable")
                for food_id in food_ids
            }

        by_id = {profile.food_id.lower(): profile for profile in profiles}
        outcomes: dict[str, ResolutionOutcome] = {}
        for food_id in food_ids:
            profile = by_id.get(food_id.lower())
            if profile is None:
                outcomes[food_id] = _degraded(food_id, "not found in catalog")
            else:
                outcomes[food_id] = Resolved(profile)
        return outcomes

    async def _resolve_external(self, food_id: str) -> ResolutionOutcome:
        cache_key = f"food:{food_id}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, FoodNutrientProfile):
            return Resolved(cached)

        source = external_source(food_id)
        if source is None:
            return _degraded(food_id, "unsupported food id")

        try:
            if source is FoodSource.USDA:
                if self.usda_client is None:
                    return _degraded(food_id, "USDA lookups are not configured")
                profile = await self._fetch_usda(food_id, self.usda_client)
            else:
                if self.off_client is None:
                    return _degraded(food_id, "Open Food Facts lookups are not configured")
                profile = await self._fetch_openfoodfacts(food_id, self.off_client)
        except TimeoutError:
            return _degraded(food_id, f"timed out after {self.timeout_seconds}s")
        except Exception as exc:
            return _degraded(
                food_id,
                f"lookup failed (status={_status_code_from_exception(exc)}): {exc}",
            )

        if profile is None:
            return _degraded(food_id, "provider returned no data")
        self.cache.set(cache_key, profile, ttl_seconds=self.food_ttl_seconds)
        return Resolved(profile)

    async def _fetch_usda(
        self, food_id: str, client: UsdaClient
    ) -> FoodNutrientProfile | None:
        fdc_id = food_id[len(USDA_PREFIX) :]
        payload = await self._call_with_retry(
            lambda: asyncio.wait_for(client.get_food(fdc_id), self.timeout_seconds),
            action=food_id,
        )
        if not payload:
            return None
        return normalize_usda(food_id, payload)

    async def _fetch_openfoodfacts(
        self, food_id: str, client: OpenFoodFactsClient
    ) -> FoodNutrientProfile | None:
        code = food_id[len(OFF_PREFIX) :]
        payload = await self._call_with_retry(
            lambda: asyncio.wait_for(client.get_product(code), self.timeout_seconds),
            action=food_id,
        )
        if not payload:
            return None
        return normalize_openfoodfacts(food_id, payload)

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[dict[str, object]]]", *, action: str
    ) -> dict[str, object]:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                _logger.debug(
                    "Food lookup %s failed (attempt %s/%s, status=%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    _status_code_from_exception(exc),
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def _degraded(food_id: str, reason: str) -> Degraded:
    _logger.warning("Using placeholder for food %s: %s", food_id, reason)
    return Degraded(profile=FoodNutrientProfile.placeholder(food_id), reason=reason)


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"
