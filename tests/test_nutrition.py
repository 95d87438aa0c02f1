"""
Tests for nutrition estimates, meal text/photo analysis, food search and barcode lookup.
"""

from app.config import settings
from app.exceptions import NotFoundError, UpstreamTimeoutError
from adapters import food_api_adapter, openai_adapter
from services.nutrition_service import clean_meal_analysis, parse_estimate_text

from test_fixtures import api


def enable_ai(monkeypatch):
    monkeypatch.setattr(settings, "openai_api_key", "sk-test")


# =============================================================================
# ESTIMATES
# =============================================================================


def test_estimate_without_ai_uses_builtin_values(client, auth_headers):
    r = client.post(
        api("/nutrition/estimate"),
        json={"food_name": "Grilled Chicken Breast", "quantity": 200, "unit": "g"},
        headers=auth_headers,
    )

    assert r.status_code == 200
    estimation = r.json()["estimation"]
    assert estimation["method"] == "mock_estimation"
    assert estimation["nutrition"]["calories_per_100g"] == 165
    assert estimation["total"] == {"calories": 330, "protein": 62.0, "carbs": 0.0, "fat": 7.2}
    assert "Reasonably confident" in estimation["notes"]


def test_estimate_unknown_food_defaults_with_low_confidence(client, auth_headers):
    estimation = client.post(
        api("/nutrition/estimate"), json={"food_name": "dragon fruit tart"}, headers=auth_headers
    ).json()["estimation"]

    assert estimation["quantity"] == 100
    assert estimation["nutrition"]["calories_per_100g"] == 150
    assert estimation["nutrition"]["confidence"] == 0.3
    assert "Low confidence" in estimation["notes"]


def test_estimate_non_gram_unit_has_no_total(client, auth_headers):
    estimation = client.post(
        api("/nutrition/estimate"),
        json={"food_name": "banana", "quantity": 2, "unit": "piece"},
        headers=auth_headers,
    ).json()["estimation"]
    assert estimation["total"] is None


def test_estimate_requires_food_name(client, auth_headers):
    r = client.post(api("/nutrition/estimate"), json={"food_name": "   "}, headers=auth_headers)
    assert r.status_code == 400


def test_estimate_with_ai(client, auth_headers, monkeypatch):
    enable_ai(monkeypatch)
    monkeypatch.setattr(
        openai_adapter,
        "chat_text",
        lambda messages, **kwargs: '{"calories_per_100g": 52, "protein_per_100g": 0.3, '
        '"carbs_per_100g": 14, "fat_per_100g": 0.2, "confidence": 0.95, "notes": "Raw apple"}',
    )

    estimation = client.post(
        api("/nutrition/estimate"), json={"food_name": "apple", "quantity": 150}, headers=auth_headers
    ).json()["estimation"]

    assert estimation["method"] == "openai_estimation"
    assert estimation["nutrition"]["carbs_per_100g"] == 14
    assert estimation["notes"] == "Raw apple"
    assert estimation["total"]["calories"] == 78


def test_estimate_ai_failure_falls_back(client, auth_headers, monkeypatch):
    enable_ai(monkeypatch)

    def timeout(messages, **kwargs):
        raise UpstreamTimeoutError("AI request timed out")

    monkeypatch.setattr(openai_adapter, "chat_text", timeout)

    r = client.post(api("/nutrition/estimate"), json={"food_name": "apple"}, headers=auth_headers)
    assert r.status_code == 200
    estimation = r.json()["estimation"]
    assert estimation["method"] == "fallback"
    assert estimation["error"] == "AI estimation service unavailable"
    assert estimation["nutrition"]["calories_per_100g"] == 150


def test_parse_estimate_text_from_prose():
    values = parse_estimate_text("Calories: 250 per 100g, Protein: 12.5 g, Carbohydrates: 30 g")
    assert values["calories"] == 250
    assert values["protein"] == 12.5
    assert values["carbs"] == 30
    assert values["fat"] == 6  # missing, default


def test_parse_estimate_text_tolerates_text_values():
    values = parse_estimate_text(
        '{"calories_per_100g": "about 165 kcal", "protein_per_100g": "31g", '
        '"carbs_per_100g": null, "fat_per_100g": true, "confidence": "high"}'
    )
    assert values["calories"] == 165
    assert values["protein"] == 31
    assert values["carbs"] == 0
    assert values["fat"] == 0
    assert values["confidence"] == 0.7


def test_estimate_with_text_values_from_ai(client, auth_headers, monkeypatch):
    enable_ai(monkeypatch)
    monkeypatch.setattr(
        openai_adapter,
        "chat_text",
        lambda messages, **kwargs: '{"calories_per_100g": "about 165 kcal", "protein_per_100g": 31}',
    )

    r = client.post(api("/nutrition/estimate"), json={"food_name": "chicken", "quantity": 200}, headers=auth_headers)
    assert r.status_code == 200, r.text
    estimation = r.json()["estimation"]
    assert estimation["method"] == "openai_estimation"
    assert estimation["nutrition"]["calories_per_100g"] == 165
    assert estimation["total"]["calories"] == 330


# =============================================================================
# MEAL ANALYSIS
# =============================================================================

ANALYSIS = {
    "items": [
        {"name": "Scrambled eggs", "quantity": 2, "unit": "pieces", "calories": 180, "protein": 12, "carbs": 1.5, "fat": 13},
        {"name": "Toast", "quantity": 1, "unit": "slice", "calories": 80, "protein": 3, "carbs": 14, "fat": 1},
        {"quantity": 1, "calories": 999},
    ],
    "notes": "Typical portions assumed",
}


def test_clean_meal_analysis_recomputes_totals():
    cleaned = clean_meal_analysis(ANALYSIS)
    assert [i["name"] for i in cleaned["items"]] == ["Scrambled eggs", "Toast"]
    assert cleaned["totals"] == {"calories": 260, "protein": 15, "carbs": 15.5, "fat": 14}
    assert cleaned["notes"] == ["Typical portions assumed"]


def test_analyze_text(client, auth_headers, monkeypatch):
    monkeypatch.setattr(openai_adapter, "chat_json", lambda system, user, **kwargs: ANALYSIS)

    r = client.post(
        api("/food/analyze-text"), json={"text": "two scrambled eggs and a toast"}, headers=auth_headers
    )
    assert r.status_code == 200
    body = r.json()
    assert body["original_text"] == "two scrambled eggs and a toast"
    assert body["analysis"]["totals"]["calories"] == 260


def test_analyze_text_too_long(client, auth_headers):
    r = client.post(api("/food/analyze-text"), json={"text": "x" * 501}, headers=auth_headers)
    assert r.status_code == 400


def test_analyze_text_without_ai_key(client, auth_headers):
    r = client.post(api("/food/analyze-text"), json={"text": "pizza"}, headers=auth_headers)
    assert r.status_code == 503


def test_analyze_image_requires_image(client, auth_headers):
    r = client.post(api("/food/analyze-image"), json={}, headers=auth_headers)
    assert r.status_code == 400


def test_analyze_image_sends_data_url(client, auth_headers, monkeypatch):
    seen = {}

    def fake_vision(prompt, image_url, **kwargs):
        seen["url"] = image_url
        return ANALYSIS

    monkeypatch.setattr(openai_adapter, "vision_json", fake_vision)

    r = client.post(
        api("/food/analyze-image"), json={"image_base64": "aGVsbG8=", "mime_type": "image/png"}, headers=auth_headers
    )
    assert r.status_code == 200
    assert seen["url"] == "data:image/png;base64,aGVsbG8="
    assert len(r.json()["analysis"]["items"]) == 2


# =============================================================================
# FOOD SEARCH AND BARCODES
# =============================================================================


def test_food_search_min_length(client, auth_headers):
    r = client.get(api("/food/search?q=a"), headers=auth_headers)
    assert r.status_code == 400


def test_food_search_mock_list(client, auth_headers):
    body = client.get(api("/food/search?q=BAN"), headers=auth_headers).json()
    assert body["source"] == "mock"
    assert [f["name"] for f in body["foods"]] == ["Banana"]


def test_food_search_edamam(client, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "edamam_food_app_id", "app")
    monkeypatch.setattr(settings, "edamam_food_app_key", "key")
    monkeypatch.setattr(
        food_api_adapter, "search_foods", lambda query, limit=15: [{"id": "food_1", "name": "Oat milk"}]
    )

    body = client.get(api("/food/search?q=oat milk"), headers=auth_headers).json()
    assert body == {"source": "edamam", "foods": [{"id": "food_1", "name": "Oat milk"}]}


def test_barcode_must_be_digits(client, auth_headers):
    r = client.get(api("/barcode/product?barcode=12ab5678"), headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Barcode must be 8-14 digits"


def test_barcode_lookup(client, auth_headers, monkeypatch):
    monkeypatch.setattr(
        food_api_adapter,
        "get_product",
        lambda code: {"barcode": code, "name": "Nutella", "source": "openfoodfacts"},
    )
    body = client.get(api("/barcode/product?barcode=3017620422003"), headers=auth_headers).json()
    assert body["name"] == "Nutella"
    assert body["barcode"] == "3017620422003"


def test_barcode_not_found(client, auth_headers, monkeypatch):
    def missing(code):
        raise NotFoundError("Product not found")

    monkeypatch.setattr(food_api_adapter, "get_product", missing)
    r = client.get(api("/barcode/product?barcode=00000000"), headers=auth_headers)
    assert r.status_code == 404
