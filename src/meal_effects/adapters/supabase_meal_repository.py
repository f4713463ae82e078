"""Supabase repository for meals."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from meal_effects.domain.meals import MealContext, MealItemInput, MealPage, MealRecord
from meal_effects.services.meals import MealRepository

_COLUMNS = "id, user_id, logged_at, items, context, computed, notes"


@dataclass
class SupabaseMealRepository(MealRepository):
    """Supabase implementation for meals."""

    client: Client

    def create_meal(  # noqa: PLR0913
        self,
        user_id: UUID,
        logged_at: datetime,
        items: list[MealItemInput],
        context: MealContext,
        computed: dict[str, object],
        notes: str | None,
    ) -> MealRecord:
        """Create a meal row and return it."""
        response = (
            self.client.table("meals")
            .insert(
                {
                    "user_id": str(user_id),
                    "logged_at": logged_at.isoformat(),
                    "items": [item.as_dict() for item in items],
                    "context": context.as_dict(),
                    "computed": computed,
                    "notes": notes,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create meal")
        return _parse_meal(response.data[0])

    def get_meal(self, meal_id: UUID) -> MealRecord | None:
        """Return a meal row by id."""
        response = (
            self.client.table("meals")
            .select(_COLUMNS)
            .eq("id", str(meal_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_meal(response.data[0])

    def update_meal(
        self,
        meal_id: UUID,
        *,
        items: list[MealItemInput],
        context: MealContext,
        computed: dict[str, object],
        notes: str | None,
    ) -> MealRecord:
        """Replace the mutable columns of a meal row."""
        response = (
            self.client.table("meals")
            .update(
                {
                    "items": [item.as_dict() for item in items],
                    "context": context.as_dict(),
                    "computed": computed,
                    "notes": notes,
                }
            )
            .eq("id", str(meal_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to update meal {meal_id}")
        return _parse_meal(response.data[0])

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
        """Return a user's meals in the time range with the matching row count."""
        query = (
            self.client.table("meals")
            .select(_COLUMNS, count="exact")
            .eq("user_id", str(user_id))
        )
        if start is not None:
            query = query.gte("logged_at", start.isoformat())
        if end is not None:
            query = query.lt("logged_at", end.isoformat())
        query = query.order("logged_at", desc=descending)
        if limit is not None:
            query = query.range(offset, offset + limit - 1)
        response = query.execute()
        meals = [_parse_meal(row) for row in response.data or []]
        total = response.count if response.count is not None else len(meals)
        return MealPage(meals=meals, total=total)

    def delete_meal(self, meal_id: UUID, user_id: UUID) -> bool:
        """Delete a meal row owned by the user."""
        response = (
            self.client.table("meals")
            .delete()
            .eq("id", str(meal_id))
            .eq("user_id", str(user_id))
            .execute()
        )
        return bool(response.data)


def _parse_meal(row: dict[str, object]) -> MealRecord:
    return MealRecord(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        logged_at=datetime.fromisoformat(str(row["logged_at"])),
        items=[MealItemInput.from_dict(item) for item in row.get("items") or []],
        context=MealContext.from_dict(row.get("context")),
        computed=row.get("computed") or {},
        notes=row.get("notes"),
    )
