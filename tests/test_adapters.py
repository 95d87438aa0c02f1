"""
Tests for the external API adapters with the HTTP and OpenAI clients replaced by fakes.
"""

from types import SimpleNamespace

import httpx
import openai
import pytest

from adapters import exercise_api_adapter, food_api_adapter, openai_adapter
from app.config import settings
from app.exceptions import (
    NotFoundError,
    RateLimitedError,
    ServiceUnavailableError,
    UpstreamServiceError,
    UpstreamTimeoutError,
)

from test_fixtures import fake_completion


class FakeHttp:
    """Replacement for ``httpx.get`` returning one canned response."""

    def __init__(self, status_code=200, json=None, text=None, error=None):
        self.status_code = status_code
        self.json = json
        self.text = text
        self.error = error
        self.calls = []

    def __call__(self, url, params=None, **kwargs):
        self.calls.append((url, params))
        if self.error:
            raise self.error
        request = httpx.Request("GET", url)
        if self.json is not None:
            return httpx.Response(self.status_code, json=self.json, request=request)
        return httpx.Response(self.status_code, text=self.text or "", request=request)


@pytest.fixture
def fake_http(monkeypatch):
    def install(**kwargs):
        fake = FakeHttp(**kwargs)
        monkeypatch.setattr(httpx, "get", fake)
        return fake
    return install


# =============================================================================
# FOOD DATA
# =============================================================================


def test_search_foods_maps_and_deduplicates(fake_http):
    fake = fake_http(json={
        "parsed": [{"food": {"foodId": "f1", "label": "Apple", "nutrients": {"ENERC_KCAL": 52.4, "PROCNT": 0.26, "CHOCDF": 13.81}}}],
        "hints": [
            {"food": {"foodId": "f1", "label": "apple"}},
            {"food": {"foodId": "f2", "label": "Apple juice", "brand": "Happy Day", "nutrients": {"FAT": 0.13}}},
            {"food": {"foodId": "f3"}},
        ],
    })

    foods = food_api_adapter.search_foods("apple")

    assert [f["id"] for f in foods] == ["f1", "f2"]
    assert foods[0]["calories_per_100g"] == 52
    assert foods[0]["protein_per_100g"] == 0.3
    assert foods[0]["carbs_per_100g"] == 13.8
    assert foods[0]["category"] == "Unknown"
    assert foods[1]["brand"] == "Happy Day"
    assert fake.calls[0][1]["ingr"] == "apple"


def test_search_recipes_passes_filters(fake_http):
    fake = fake_http(json={"hits": [{"recipe": {"uri": "edamam#r1", "label": "Paella", "calories": 1234.6, "yield": 4}}]})

    recipes = food_api_adapter.search_recipes("rice", meal_type="Dinner", cuisine_type="Mediterranean")

    assert recipes[0]["title"] == "Paella"
    assert recipes[0]["calories"] == 1235
    assert recipes[0]["ingredient_lines"] == []
    params = fake.calls[0][1]
    assert params["mealType"] == "Dinner"
    assert params["cuisineType"] == "Mediterranean"
    assert "diet" not in params


def test_get_product(fake_http, monkeypatch):
    monkeypatch.setattr(settings, "openfoodfacts_base_url", "https://off.example/")
    fake = fake_http(json={
        "status": 1,
        "product": {
            "product_name": "Oat drink",
            "brands": "Oatly",
            "nutriments": {"energy_100g": 196.6, "proteins_100g": 1, "sugars_100g": 4.04},
            "nutriscore_grade": "b",
        },
    })

    product = food_api_adapter.get_product("7394376616037")

    assert fake.calls[0][0] == "https://off.example/api/v0/product/7394376616037.json"
    assert product["name"] == "Oat drink"
    assert product["nutrition"]["calories"] == 47
    assert product["nutrition"]["sugar"] == 4.0
    assert product["nutri_score"] == "b"
    assert product["allergens"] == []


def test_get_product_unknown_barcode(fake_http):
    fake_http(json={"status": 0, "status_verbose": "product not found"})
    with pytest.raises(NotFoundError):
        food_api_adapter.get_product("00000000")


def test_food_api_error_mapping(fake_http):
    fake_http(status_code=503, text="unavailable")
    with pytest.raises(UpstreamServiceError):
        food_api_adapter.search_foods("apple")

    fake_http(error=httpx.ReadTimeout("slow"))
    with pytest.raises(UpstreamTimeoutError):
        food_api_adapter.search_foods("apple")

    fake_http(text="<html>maintenance</html>")
    with pytest.raises(UpstreamServiceError):
        food_api_adapter.get_product("12345678")


# =============================================================================
# EXERCISE CATALOG
# =============================================================================


def test_exercises_by_muscle(fake_http, monkeypatch):
    monkeypatch.setattr(settings, "exercise_api_base_url", "https://exercises.example/api/v1")
    fake = fake_http(json={
        "success": True,
        "data": [
            {"exerciseId": "abc", "name": "push-up", "gifUrl": "https://g/abc.gif", "targetMuscles": ["pectorals"]},
            {"exerciseId": "def", "name": "dip"},
            "garbage",
        ],
    })

    exercises = exercise_api_adapter.exercises_by_muscle("pectorals", limit=5)

    assert fake.calls[0] == ("https://exercises.example/api/v1/muscles/pectorals/exercises", {"offset": 0, "limit": 5})
    assert [e["exercise_id"] for e in exercises] == ["abc", "def"]
    assert exercises[0]["target_muscles"] == ["pectorals"]
    assert exercises[1]["instructions"] == []


def test_exercises_by_muscle_accepts_plain_list(fake_http):
    fake_http(json=[{"id": "1", "name": "squat"}, {"id": "2", "name": "lunge"}])
    assert [e["name"] for e in exercise_api_adapter.exercises_by_muscle("quads", limit=1)] == ["squat"]


def test_exercise_catalog_errors(fake_http):
    fake_http(error=httpx.ConnectTimeout("slow"))
    with pytest.raises(UpstreamTimeoutError):
        exercise_api_adapter.exercises_by_muscle("abs")

    fake_http(status_code=404, json={"message": "unknown muscle"})
    with pytest.raises(UpstreamServiceError):
        exercise_api_adapter.exercises_by_muscle("wings")


# =============================================================================
# OPENAI
# =============================================================================

OPENAI_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


@pytest.fixture
def fake_openai(monkeypatch):
    def install(create):
        client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
        monkeypatch.setattr(openai_adapter, "_get_client", lambda: client)
    return install


def test_chat_json_sends_json_mode(fake_openai):
    seen = {}

    def create(**params):
        seen.update(params)
        return fake_completion('```json\n{"category": "training"}\n```')

    fake_openai(create)
    result = openai_adapter.chat_json("system", "user", temperature=0, max_tokens=20, timeout=5)

    assert result == {"category": "training"}
    assert seen["response_format"] == {"type": "json_object"}
    assert seen["messages"][0] == {"role": "system", "content": "system"}
    assert seen["max_tokens"] == 20
    assert seen["timeout"] == 5


def test_vision_json_uses_vision_model(fake_openai):
    seen = {}

    def create(**params):
        seen.update(params)
        return fake_completion('{"total_amount": 990}')

    fake_openai(create)
    assert openai_adapter.vision_json("Read the bill", "https://img.example/bill.jpg") == {"total_amount": 990}
    assert seen["model"] == settings.openai_vision_model
    assert seen["messages"][0]["content"][1]["image_url"]["url"] == "https://img.example/bill.jpg"


def test_chat_json_rejects_prose(fake_openai):
    fake_openai(lambda **params: fake_completion("I cannot help with that."))
    with pytest.raises(UpstreamServiceError):
        openai_adapter.chat_json("system", "user")


def test_chat_text_empty_answer(fake_openai):
    fake_openai(lambda **params: SimpleNamespace(choices=[]))
    with pytest.raises(UpstreamServiceError):
        openai_adapter.chat_text([{"role": "user", "content": "hi"}])


@pytest.mark.parametrize(
    "error,expected",
    [
        (openai.APITimeoutError(request=OPENAI_REQUEST), UpstreamTimeoutError),
        (
            openai.RateLimitError("quota", response=httpx.Response(429, request=OPENAI_REQUEST), body=None),
            RateLimitedError,
        ),
        (openai.APIConnectionError(request=OPENAI_REQUEST), UpstreamServiceError),
    ],
)
def test_chat_text_error_mapping(fake_openai, error, expected):
    def create(**params):
        raise error

    fake_openai(create)
    with pytest.raises(expected):
        openai_adapter.chat_text([{"role": "user", "content": "hi"}])


def test_client_requires_api_key(monkeypatch):
    monkeypatch.setattr(settings, "openai_api_key", None)
    openai_adapter.reset_client()
    with pytest.raises(ServiceUnavailableError):
        openai_adapter.chat_text([{"role": "user", "content": "hi"}])


@pytest.mark.parametrize(
    "raw,expected",
    [
        ('{"a": 1}', {"a": 1}),
        ('Sure! Here it is: {"a": {"b": 2}} Enjoy.', {"a": {"b": 2}}),
        ("[1, 2]", {}),
        ("", {}),
        ("{broken", {}),
    ],
)
def test_extract_json_object(raw, expected):
    assert openai_adapter.extract_json_object(raw) == expected


def test_image_data_url():
    assert openai_adapter.image_data_url("aGk=") == "data:image/jpeg;base64,aGk="
    assert openai_adapter.image_data_url("data:image/png;base64,aGk=") == "data:image/png;base64,aGk="
