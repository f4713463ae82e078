"""Tests for the meal HTTP endpoints."""

from uuid import uuid4

from fastapi.testclient import TestClient

from meal_effects.api.app import create_app
from tests.conftest import CHICKEN_ID, SPINACH_ID, FakeReasoningClient

HEADERS = {"X-Api-Token": "api-token"}


def _client(container) -> TestClient:  # type: ignore[no-untyped-def]
    return TestClient(create_app(container))


def _meal_body() -> dict[str, object]:
    return {
        "items": [
            {"foodId": CHICKEN_ID, "grams": 150, "customName": "Grilled chicken"},
            {"foodId": SPINACH_ID, "grams": 80},
        ],
        "context": {"postWorkout": True, "plantDiversity": 2},
        "notes": "dinner",
    }


def test_health(container) -> None:
    response = _client(container).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_meal_routes_require_token(container) -> None:
    client = _client(container)

    assert client.post("/meals/preview", json=_meal_body()).status_code == 401
    response = client.post(
        "/meals/preview", json=_meal_body(), headers={"X-Api-Token": "wrong"}
    )
    assert response.status_code == 401


def test_preview_returns_analysis_with_badge_descriptions(container) -> None:
    response = _client(container).post(
        "/meals/preview", json=_meal_body(), headers=HEADERS
    )

    assert response.status_code == 200
    analysis = response.json()["analysis"]
    assert analysis["badges"]["protein"] is True
    assert analysis["badgeDescriptions"]["veg"] == "Contains vegetables or good fiber"
    assert set(analysis["effects"]) == {
        "fatForming",
        "strength",
        "immunity",
        "inflammation",
        "antiInflammatory",
        "energizing",
        "gutFriendly",
        "moodLifting",
    }
    assert container.meal_service.repository.writes == []


def test_invalid_grams_maps_to_bad_request(container) -> None:
    body = {"items": [{"foodId": CHICKEN_ID, "grams": 1500}]}

    response = _client(container).post("/meals/preview", json=body, headers=HEADERS)

    assert response.status_code == 400
    assert "grams" in response.json()["detail"]


def test_empty_items_maps_to_bad_request(container) -> None:
    response = _client(container).post(
        "/meals", json={"items": []}, headers={**HEADERS, "X-User-Id": str(uuid4())}
    )

    assert response.status_code == 400


def test_create_and_fetch_meal(container) -> None:
    client = _client(container)
    user_id = str(uuid4())

    created = client.post(
        "/meals", json=_meal_body(), headers={**HEADERS, "X-User-Id": user_id}
    )

    assert created.status_code == 201
    payload = created.json()
    assert payload["meal"]["userId"] == user_id
    assert payload["meal"]["notes"] == "dinner"
    assert payload["analysis"]["mindfulMealScore"] == payload["meal"]["computed"][
        "mindfulMealScore"
    ]

    meal_id = payload["meal"]["id"]
    fetched = client.get(f"/meals/{meal_id}", headers=HEADERS)
    assert fetched.status_code == 200
    assert fetched.json()["meal"]["id"] == meal_id


def test_create_requires_user_id(container) -> None:
    response = _client(container).post("/meals", json=_meal_body(), headers=HEADERS)

    assert response.status_code == 400


def test_get_missing_meal_returns_404(container) -> None:
    response = _client(container).get(f"/meals/{uuid4()}", headers=HEADERS)

    assert response.status_code == 404


def test_update_meal_recomputes(container) -> None:
    client = _client(container)
    created = client.post(
        "/meals", json=_meal_body(), headers={**HEADERS, "X-User-Id": str(uuid4())}
    ).json()
    meal_id = created["meal"]["id"]

    response = client.put(
        f"/meals/{meal_id}",
        json={"context": {"stressEating": True}, "notes": "late dinner"},
        headers=HEADERS,
    )

    assert response.status_code == 200
    meal = response.json()["meal"]
    assert meal["notes"] == "late dinner"
    assert meal["context"]["stressEating"] is True
    assert meal["context"]["postWorkout"] is True
    assert "Stress eating increases fat formation" in (
        meal["computed"]["effects"]["fatForming"]["why"]
    )


def test_update_missing_meal_returns_404(container) -> None:
    response = _client(container).put(
        f"/meals/{uuid4()}", json={"notes": "x"}, headers=HEADERS
    )

    assert response.status_code == 404


def test_skip_ai_via_query_header_or_body(
    container, reasoning_client: FakeReasoningClient
) -> None:
    client = _client(container)

    client.post("/meals/preview?skipAI=true", json=_meal_body(), headers=HEADERS)
    client.post(
        "/meals/preview", json=_meal_body(), headers={**HEADERS, "X-Skip-AI": "true"}
    )
    client.post("/meals/preview", json={**_meal_body(), "skipAI": True}, headers=HEADERS)
    assert reasoning_client.prompts == []

    client.post("/meals/preview", json=_meal_body(), headers=HEADERS)
    assert len(reasoning_client.prompts) == 1


def _create_on(client: TestClient, user_id: str, logged_at: str) -> str:
    body = {**_meal_body(), "loggedAt": logged_at}
    response = client.post("/meals", json=body, headers={**HEADERS, "X-User-Id": user_id})
    return response.json()["meal"]["id"]


def test_list_meals_by_date_range(container) -> None:
    client = _client(container)
    user_id = str(uuid4())
    _create_on(client, user_id, "2026-03-01T08:00:00+00:00")
    _create_on(client, user_id, "2026-03-02T23:30:00+00:00")
    _create_on(client, user_id, "2026-03-04T08:00:00+00:00")

    response = client.get(
        "/meals?startDate=2026-03-01&endDate=2026-03-02&limit=1",
        headers={**HEADERS, "X-User-Id": user_id},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["pagination"] == {"page": 1, "limit": 1, "total": 2, "pages": 2}
    assert payload["meals"][0]["loggedAt"].startswith("2026-03-02")
    assert payload["meals"][0]["items"][1]["customName"] == "Spinach"


def test_list_meals_requires_user_id(container) -> None:
    response = _client(container).get("/meals", headers=HEADERS)

    assert response.status_code == 400


def test_stats_overview(container) -> None:
    client = _client(container)
    user_id = str(uuid4())
    _create_on(client, user_id, "2026-03-01T08:00:00+00:00")
    _create_on(client, user_id, "2026-03-02T08:00:00+00:00")

    response = client.get(
        "/meals/stats/overview", headers={**HEADERS, "X-User-Id": user_id}
    )

    assert response.status_code == 200
    stats = response.json()["stats"]
    assert stats["totalMeals"] == 2
    assert stats["proteinMeals"] == 2
    assert stats["vegMeals"] == 2
    assert stats["highNovaMeals"] == 0


def test_stats_overview_without_meals(container) -> None:
    response = _client(container).get(
        "/meals/stats/overview?startDate=2026-01-01",
        headers={**HEADERS, "X-User-Id": str(uuid4())},
    )

    assert response.status_code == 200
    assert response.json()["stats"]["totalMeals"] == 0
    assert response.json()["stats"]["averageScore"] == 0


def test_delete_meal(container) -> None:
    client = _client(container)
    user_id = str(uuid4())
    meal_id = _create_on(client, user_id, "2026-03-01T08:00:00+00:00")

    other = client.delete(
        f"/meals/{meal_id}", headers={**HEADERS, "X-User-Id": str(uuid4())}
    )
    deleted = client.delete(f"/meals/{meal_id}", headers={**HEADERS, "X-User-Id": user_id})

    assert other.status_code == 404
    assert deleted.status_code == 200
    assert client.get(f"/meals/{meal_id}", headers=HEADERS).status_code == 404
