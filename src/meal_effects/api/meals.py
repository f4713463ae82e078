"""Meal API endpoints with simple token auth."""

from __future__ import annotations

import math
from datetime import UTC, date, datetime, time, timedelta
from typing import TYPE_CHECKING, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

from meal_effects.api.meal_models import MealCreateModel, MealUpdateModel
from meal_effects.domain.meals import MealAnalysis, MealContext
from meal_effects.services.badges import describe_badges
from meal_effects.services.meals import MealRequest

if TYPE_CHECKING:
    from meal_effects.containers import AppContainer

router = APIRouter(prefix="/meals", tags=["meals"])


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_api_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


async def require_user_id(x_user_id: str | None = Header(default=None)) -> UUID:
    """Return the caller's user id from the X-User-Id header."""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Missing X-User-Id header"
        )
    try:
        return UUID(x_user_id)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid X-User-Id header"
        ) from exc


@router.post("/preview", dependencies=[Depends(require_api_token)])
async def preview_meal(body: MealCreateModel, request: Request) -> dict[str, object]:
    """Analyze a meal without saving it."""
    container: AppContainer = request.app.state.container
    analysis = await container.meal_service.preview(_to_request(body, request))
    return {"analysis": _analysis_payload(analysis)}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_api_token)],
)
async def create_meal(
    body: MealCreateModel,
    request: Request,
    user_id: UUID = Depends(require_user_id),
) -> dict[str, object]:
    """Analyze and save a meal."""
    container: AppContainer = request.app.state.container
    record = await container.meal_service.create_meal(
        user_id, _to_request(body, request)
    )
    return {"meal": record.as_dict(), "analysis": record.computed}


@router.get("", dependencies=[Depends(require_api_token)])
async def list_meals(  # noqa: PLR0913
    request: Request,
    user_id: UUID = Depends(require_user_id),
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    limit: int = Query(default=50, ge=1, le=200),
    page: int = Query(default=1, ge=1),
    sort_order: Literal["asc", "desc"] = Query(default="desc", alias="sortOrder"),
) -> dict[str, object]:
    """List the caller's meals, optionally within a date range."""
    container: AppContainer = request.app.state.container
    start, end = _day_bounds(start_date, end_date)
    result = container.meal_service.list_meals(
        user_id, start, end, limit=limit, page=page, descending=sort_order == "desc"
    )
    return {
        "meals": [meal.as_dict() for meal in result.meals],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": result.total,
            "pages": math.ceil(result.total / limit),
        },
    }


@router.get("/stats/overview", dependencies=[Depends(require_api_token)])
async def meal_stats(
    request: Request,
    user_id: UUID = Depends(require_user_id),
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
) -> dict[str, object]:
    """Average scores and totals and count badge hits over the caller's meals."""
    container: AppContainer = request.app.state.container
    start, end = _day_bounds(start_date, end_date)
    stats = container.meal_service.stats(user_id, start, end)
    return {"stats": stats.as_dict()}


@router.get("/{meal_id}", dependencies=[Depends(require_api_token)])
async def get_meal(meal_id: UUID, request: Request) -> dict[str, object]:
    """Return a saved meal."""
    container: AppContainer = request.app.state.container
    record = container.meal_service.get_meal(meal_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"meal": record.as_dict()}


@router.put("/{meal_id}", dependencies=[Depends(require_api_token)])
async def update_meal(
    meal_id: UUID, body: MealUpdateModel, request: Request
) -> dict[str, object]:
    """Update a saved meal, recomputing its analysis when inputs change."""
    container: AppContainer = request.app.state.container
    record = await container.meal_service.recompute_meal(
        meal_id,
        items=[item.to_domain() for item in body.items] if body.items is not None else None,
        context=body.context.updates() if body.context is not None else None,
        notes=body.notes,
        skip_ai=_skip_ai(body.skip_ai, request),
        user_profile=body.user_profile,
    )
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"meal": record.as_dict(), "analysis": record.computed}


@router.delete("/{meal_id}", dependencies=[Depends(require_api_token)])
async def delete_meal(
    meal_id: UUID, request: Request, user_id: UUID = Depends(require_user_id)
) -> dict[str, object]:
    """Delete one of the caller's meals."""
    container: AppContainer = request.app.state.container
    if not container.meal_service.delete_meal(meal_id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"deleted": True}


def _to_request(body: MealCreateModel, request: Request) -> MealRequest:
    return MealRequest(
        items=[item.to_domain() for item in body.items],
        context=body.context.to_domain() if body.context else MealContext(),
        notes=body.notes,
        logged_at=body.logged_at,
        skip_ai=_skip_ai(body.skip_ai, request),
        user_profile=body.user_profile,
    )


def _skip_ai(body_flag: bool, request: Request) -> bool:
    """AI can be skipped from the body, the query string or a header."""
    if body_flag:
        return True
    if request.query_params.get("skipAI", "").lower() == "true":
        return True
    return request.headers.get("x-skip-ai", "").lower() == "true"


def _analysis_payload(analysis: MealAnalysis) -> dict[str, object]:
    payload = analysis.as_computed()
    payload["badgeDescriptions"] = describe_badges(analysis.badges)
    payload["quality"] = analysis.mindful.quality.value
    payload["tips"] = list(analysis.mindful.tips)
    payload["degradedFoodIds"] = list(analysis.degraded_food_ids)
    return payload


def _day_bounds(
    start_date: date | None, end_date: date | None
) -> tuple[datetime | None, datetime | None]:
    """Turn inclusive UTC calendar days into a half-open datetime range."""
    start = datetime.combine(start_date, time.min, tzinfo=UTC) if start_date else None
    end = (
        datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=UTC)
        if end_date
        else None
    )
    return start, end
