"""
Tests for meal plans: empty plans, day-by-day AI generation, meal tracking and ownership.
"""

import pytest
from bson import ObjectId

from app.config import settings
from app.exceptions import UpstreamTimeoutError
from adapters import openai_adapter
from domain.enums import PlanMealType
from domain.schemas.meal_plan_schemas import MealPlanPreferences
from services.meal_plan_service import build_day_prompt

from test_fixtures import api


def plan_payload(**overrides):
    payload = {"name": "Spring week", "type": "weekly", "start_date": "2024-03-11", "generate_with_ai": False}
    payload.update(overrides)
    return payload


def create_plan(client, headers, **overrides):
    r = client.post(api("/meal-plans"), json=plan_payload(**overrides), headers=headers)
    assert r.status_code == 201, r.text
    return r.json()["meal_plan"]


class FakeDayGenerator:
    """Stands in for the chat model: one day of meals per call, optionally timing out."""

    def __init__(self, fail_on_call=None):
        self.calls = 0
        self.prompts = []
        self.fail_on_call = fail_on_call

    def __call__(self, system, prompt, **kwargs):
        self.calls += 1
        self.prompts.append(prompt)
        if self.calls == self.fail_on_call:
            raise UpstreamTimeoutError("AI request timed out")
        meals = [
            {
                "meal_type": meal_type,
                "recipe": {
                    "title": f"Day {self.calls} {meal_type}",
                    "ingredients": [{"name": "oats", "amount": "60", "unit": "g"}],
                    "instructions": [{"step": "Cook", "ingredient": "60 g oats"}],
                    "caloriesPerServing": 400,
                    "servings": 2,
                    "cookingTime": "25 minutes",
                },
            }
            for meal_type in ("breakfast", "lunch", "dinner", "dessert")
        ]
        meals.append({"meal_type": "brunch", "recipe": {"title": "Ignored"}})
        meals.append({"meal_type": "lunch", "recipe": "not a recipe"})
        return {"meals": meals}


@pytest.fixture
def ai_enabled(monkeypatch):
    monkeypatch.setattr(settings, "openai_api_key", "sk-test")


# =============================================================================
# PLANS WITHOUT AI
# =============================================================================


def test_create_empty_weekly_plan(client, auth_headers):
    plan = create_plan(client, auth_headers)

    assert plan["end_date"] == "2024-03-17"
    assert [d["day_number"] for d in plan["days"]] == [1, 2, 3, 4, 5, 6, 7]
    assert plan["days"][6]["date"] == "2024-03-17"
    assert all(d["meals"] == [] for d in plan["days"])
    assert plan["is_active"] is True
    assert plan["generated_with_ai"] is False


@pytest.mark.parametrize("plan_type,days", [("daily", 1), ("monthly", 30), ("custom", 7)])
def test_plan_length_by_type(client, auth_headers, plan_type, days):
    plan = create_plan(client, auth_headers, type=plan_type)
    assert len(plan["days"]) == days


def test_plan_requires_start_date(client, auth_headers):
    payload = plan_payload()
    del payload["start_date"]
    assert client.post(api("/meal-plans"), json=payload, headers=auth_headers).status_code == 400


def test_list_plans_newest_first_and_active_filter(client, auth_headers):
    old = create_plan(client, auth_headers, name="Old", start_date="2024-01-01")
    new = create_plan(client, auth_headers, name="New", start_date="2024-03-01")
    client.put(api(f"/meal-plans/{old['id']}"), json={"is_active": False}, headers=auth_headers)

    plans = client.get(api("/meal-plans"), headers=auth_headers).json()["meal_plans"]
    assert [p["name"] for p in plans] == ["New", "Old"]

    active = client.get(api("/meal-plans?active=true"), headers=auth_headers).json()["meal_plans"]
    assert [p["id"] for p in active] == [new["id"]]


def test_update_plan_days(client, auth_headers):
    plan = create_plan(client, auth_headers, type="daily")
    recipe = client.post(
        api("/recipes"),
        json={"title": "Overnight oats", "ingredients": [{"name": "oats", "quantity": "60 g"}]},
        headers=auth_headers,
    ).json()

    days = [{"day_number": 1, "date": "2024-03-11", "meals": [{"meal_type": "breakfast", "recipe_id": recipe["id"]}]}]
    r = client.put(api(f"/meal-plans/{plan['id']}"), json={"days": days, "name": "Oats day"}, headers=auth_headers)
    assert r.status_code == 200
    updated = r.json()["meal_plan"]
    assert updated["name"] == "Oats day"
    assert updated["days"][0]["meals"][0]["recipe_id"] == recipe["id"]
    assert updated["days"][0]["meals"][0]["recipe"]["title"] == "Overnight oats"


# =============================================================================
# AI GENERATION
# =============================================================================


def test_build_day_prompt_lists_constraints_and_previous_meals():
    prefs = MealPlanPreferences(allergies=["peanuts"], dislikes=["olives"], calorie_target=2000)
    prompt = build_day_prompt(prefs, 3, 7, ["Shakshuka", "Pad thai"])

    assert "day 3 of a 7-day meal plan" in prompt
    assert "- Allergies: peanuts" in prompt
    assert "- Avoid: olives" in prompt
    assert "2000 kcal" in prompt
    assert "Shakshuka, Pad thai" in prompt
    assert "Dietary restrictions" not in prompt


def test_create_daily_plan_with_ai(client, db, auth_headers, ai_enabled, monkeypatch):
    generator = FakeDayGenerator()
    monkeypatch.setattr(openai_adapter, "chat_json", generator)

    plan = create_plan(client, auth_headers, type="daily", generate_with_ai=True)

    assert generator.calls == 1
    meals = plan["days"][0]["meals"]
    assert [m["meal_type"] for m in meals] == ["breakfast", "lunch", "dinner", "dessert"]
    assert meals[0]["recipe_title"] == "Day 1 breakfast"
    assert meals[0]["recipe"]["prep_time"] == 25
    assert meals[0]["recipe"]["ingredients"][0] == {"name": "oats", "quantity": "60 g", "grams": 60.0}
    assert plan["generated_with_ai"] is True

    saved = list(db.recipes.find())
    assert len(saved) == 4
    assert all(r["external_id"].startswith("ai-meal-plan-") for r in saved)
    assert {r["category"] for r in saved} == {"breakfast", "lunch", "dinner", "dessert"}


def test_ai_plan_avoids_repeating_earlier_days(client, auth_headers, ai_enabled, monkeypatch):
    generator = FakeDayGenerator()
    monkeypatch.setattr(openai_adapter, "chat_json", generator)

    plan = create_plan(client, auth_headers, generate_with_ai=True, preferences={"allergies": ["shellfish"]})

    assert generator.calls == 7
    assert "Day 1 dinner" in generator.prompts[1]
    assert "Day 6 dessert" in generator.prompts[6]
    assert "- Allergies: shellfish" in generator.prompts[0]
    assert plan["days"][6]["meals"][3]["recipe_title"] == "Day 7 dessert"


def test_ai_timeout_names_the_day(client, db, auth_headers, ai_enabled, monkeypatch):
    monkeypatch.setattr(openai_adapter, "chat_json", FakeDayGenerator(fail_on_call=3))

    r = client.post(api("/meal-plans"), json=plan_payload(generate_with_ai=True), headers=auth_headers)

    assert r.status_code == 504
    assert r.json()["error"]["message"] == "AI generation timed out on day 3/7"
    assert db.meal_plans.count_documents({}) == 0
    assert db.recipes.count_documents({}) == 8


def test_ai_plan_without_key(client, auth_headers):
    r = client.post(api("/meal-plans"), json=plan_payload(generate_with_ai=True), headers=auth_headers)
    assert r.status_code == 503


# =============================================================================
# MEAL TRACKING
# =============================================================================


@pytest.fixture
def generated_plan(client, auth_headers, ai_enabled, monkeypatch):
    monkeypatch.setattr(openai_adapter, "chat_json", FakeDayGenerator())
    return create_plan(client, auth_headers, type="daily", generate_with_ai=True)


def test_complete_meal(client, auth_headers, generated_plan):
    r = client.patch(
        api(f"/meal-plans/{generated_plan['id']}/meals"),
        json={"day_number": 1, "meal_type": "lunch", "updates": {"completed": True, "notes": "Extra salad"}},
        headers=auth_headers,
    )
    assert r.status_code == 200
    lunch = r.json()["meal_plan"]["days"][0]["meals"][1]
    assert lunch["completed"] is True
    assert lunch["completed_at"] is not None
    assert lunch["notes"] == "Extra salad"

    r = client.patch(
        api(f"/meal-plans/{generated_plan['id']}/meals"),
        json={"day_number": 1, "meal_type": "lunch", "updates": {"completed": False}},
        headers=auth_headers,
    )
    lunch = r.json()["meal_plan"]["days"][0]["meals"][1]
    assert lunch["completed"] is False
    assert lunch["completed_at"] is None
    assert lunch["notes"] == "Extra salad"


def test_update_meal_unknown_day_or_meal(client, auth_headers, generated_plan):
    url = api(f"/meal-plans/{generated_plan['id']}/meals")

    r = client.patch(url, json={"day_number": 2, "meal_type": "lunch", "updates": {"completed": True}}, headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["error"]["message"] == "Day not found"

    r = client.patch(url, json={"day_number": 1, "meal_type": PlanMealType.SNACK.value, "updates": {}}, headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["error"]["message"] == "Meal not found"


# =============================================================================
# OWNERSHIP
# =============================================================================


def test_plan_not_found_and_private(client, auth_headers):
    from test_fixtures import register_user

    plan = create_plan(client, auth_headers)
    other_headers, _ = register_user(client, "emma")

    r = client.get(api(f"/meal-plans/{plan['id']}"), headers=other_headers)
    assert r.status_code == 404
    assert r.json()["error"]["message"] == "Meal plan not found"
    assert client.get(api(f"/meal-plans/{ObjectId()}"), headers=auth_headers).status_code == 404


def test_delete_plan(client, auth_headers):
    plan = create_plan(client, auth_headers)

    r = client.delete(api(f"/meal-plans/{plan['id']}"), headers=auth_headers)
    assert r.json() == {"success": True, "message": "Meal plan deleted successfully"}
    assert client.delete(api(f"/meal-plans/{plan['id']}"), headers=auth_headers).status_code == 404
