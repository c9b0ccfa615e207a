"""Tests for HTTP endpoints."""

from fastapi.testclient import TestClient

from macro_planner.api.app import create_app, create_default_app

PERSONAL_INFO = {
    "gender": "male",
    "age": 30,
    "weight": 70,
    "height": 175,
    "activityLevel": "moderate",
    "goal": "maintain",
    "dietType": "balanced",
}


def test_health(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_targets_endpoint(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/targets", json=PERSONAL_INFO)

    assert response.status_code == 200
    data = response.json()
    assert data["targetCalories"] == 2556
    assert data["protein"] == 192
    assert data["carbs"] == 256
    assert data["fat"] == 85
    assert data["bmr"] == 1649


def test_targets_endpoint_validates_ranges(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/targets", json={**PERSONAL_INFO, "age": 12})

    assert response.status_code == 422


def test_meal_plan_from_personal_info(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/meal-plans", json={"personalInfo": PERSONAL_INFO})

    assert response.status_code == 200
    data = response.json()
    assert [meal["name"] for meal in data["meals"]] == [
        "Breakfast",
        "Lunch",
        "Dinner",
        "Snacks",
    ]
    assert data["quality"] in {"excellent", "acceptable", "poor-fit"}
    assert data["error"] is None
    assert data["targets"]["targetCalories"] == 2556
    assert data["totals"]["calories"] == sum(
        meal["totals"]["calories"] for meal in data["meals"]
    )
    first_food = data["meals"][0]["foods"][0]
    assert first_food["portionSize"] > 0
    assert first_food["reference"]["name"] == first_food["name"]
    assert set(data["progress"]) == {"protein", "carbs", "fat", "calories"}
    assert all(0 <= value <= 100 for value in data["progress"].values())


def test_meal_plan_from_explicit_targets(container) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/meal-plans",
        json={
            "targets": {"targetCalories": 0, "protein": 0, "carbs": 0, "fat": 0}
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert all(meal["foods"] == [] for meal in data["meals"])


def test_meal_plan_requires_one_source(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/meal-plans", json={})

    assert response.status_code == 422


def test_food_search(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/foods", params={"query": "rice"})

    assert response.status_code == 200
    names = [food["name"] for food in response.json()["foods"]]
    assert names == ["Brown Rice", "White Rice"]
    assert response.json()["foods"][0]["mealTypes"] == ["dinner", "lunch"]


def test_food_search_rejects_unknown_meal_type(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/foods", params={"query": "rice", "meal_type": "brunch"})

    assert response.status_code == 422


def test_default_app_uses_environment_settings(monkeypatch) -> None:
    monkeypatch.setenv("MACRO_PLANNER_RANDOM_SEED", "5")

    app = create_default_app()

    assert app.state.container.settings.random_seed == 5
    assert TestClient(app).get("/health").status_code == 200


ZERO_TARGETS = {"targetCalories": 0, "protein": 0, "carbs": 0, "fat": 0}


def _empty_plan(client: TestClient) -> dict:
    response = client.post("/meal-plans", json={"targets": ZERO_TARGETS})
    assert response.status_code == 200
    return response.json()


def _edit(client: TestClient, plan: dict, edit: dict):
    return client.post("/meal-plans/edits", json={"plan": plan, "edit": edit})


def test_edit_adds_catalog_food_with_reference(container) -> None:
    client = TestClient(create_app(container))

    response = _edit(
        client,
        _empty_plan(client),
        {"action": "add", "mealId": 2, "foodName": "Chicken Breast", "grams": 150},
    )

    assert response.status_code == 200
    data = response.json()
    lunch = data["meals"][1]
    assert lunch["mealType"] == "lunch"
    (chicken,) = lunch["foods"]
    assert chicken["portionSize"] == 150
    assert chicken["protein"] == 46.5
    assert chicken["calories"] == 248
    assert chicken["reference"]["protein"] == 31
    assert lunch["totals"]["calories"] == 248
    assert data["totals"]["calories"] == 248


def test_edit_resizes_from_reference_values(container) -> None:
    client = TestClient(create_app(container))
    plan = _edit(
        client,
        _empty_plan(client),
        {"action": "add", "mealId": 2, "foodName": "Chicken Breast", "grams": 150},
    ).json()

    response = _edit(
        client, plan, {"action": "resize", "mealId": 2, "index": 0, "grams": 100}
    )

    assert response.status_code == 200
    chicken = response.json()["meals"][1]["foods"][0]
    assert chicken["portionSize"] == 100
    assert chicken["protein"] == 31
    assert chicken["calories"] == 165


def test_edit_replaces_food_at_same_portion(container) -> None:
    client = TestClient(create_app(container))
    plan = _edit(
        client,
        _empty_plan(client),
        {"action": "add", "mealId": 3, "foodName": "Chicken Breast", "grams": 150},
    ).json()

    response = _edit(
        client,
        plan,
        {"action": "replace", "mealId": 3, "index": 0, "foodName": "Salmon"},
    )

    assert response.status_code == 200
    salmon = response.json()["meals"][2]["foods"][0]
    assert salmon["name"] == "Salmon"
    assert salmon["portionSize"] == 150
    assert salmon["calories"] == 312


def test_edit_reclassifies_against_plan_targets(container) -> None:
    client = TestClient(create_app(container))
    plan = _empty_plan(client)
    plan["targets"] = {"targetCalories": 508, "protein": 52, "carbs": 56, "fat": 6}

    plan = _edit(
        client,
        plan,
        {"action": "add", "mealId": 2, "foodName": "Chicken Breast", "grams": 150},
    ).json()
    assert plan["quality"] == "poor-fit"
    response = _edit(
        client,
        plan,
        {"action": "add", "mealId": 2, "foodName": "White Rice", "grams": 200},
    )

    data = response.json()
    assert data["quality"] == "excellent"
    assert data["message"].startswith("Excellent")
    assert data["progress"]["carbs"] == 100
    assert data["totals"]["calories"] == 508


def test_edit_manual_food_then_remove(container) -> None:
    client = TestClient(create_app(container))
    manual = {"name": "Homemade Bar", "protein": 10, "carbs": 20, "fat": 5, "grams": 50}

    plan = _edit(
        client, _empty_plan(client), {"action": "add", "mealId": 4, "manual": manual}
    ).json()
    bar = plan["meals"][3]["foods"][0]
    assert bar["calories"] == 165
    assert bar["reference"]["calories"] == 330

    response = _edit(client, plan, {"action": "remove", "mealId": 4, "index": 0})

    assert response.status_code == 200
    assert response.json()["meals"][3]["foods"] == []
    assert response.json()["totals"]["calories"] == 0


def test_edit_unknown_food_or_item_is_not_found(container) -> None:
    client = TestClient(create_app(container))
    plan = _empty_plan(client)

    unknown_food = _edit(
        client, plan, {"action": "add", "mealId": 1, "foodName": "Unicorn Steak"}
    )
    missing_item = _edit(
        client, plan, {"action": "resize", "mealId": 1, "index": 0, "grams": 50}
    )
    missing_meal = _edit(client, plan, {"action": "remove", "mealId": 9, "index": 0})

    assert unknown_food.status_code == 404
    assert missing_item.status_code == 404
    assert missing_meal.status_code == 404


def test_edit_rejects_malformed_edits(container) -> None:
    client = TestClient(create_app(container))
    plan = _empty_plan(client)

    no_food = _edit(client, plan, {"action": "add", "mealId": 1})
    unknown_action = _edit(client, plan, {"action": "swap", "mealId": 1})

    assert no_food.status_code == 422
    assert unknown_action.status_code == 422
