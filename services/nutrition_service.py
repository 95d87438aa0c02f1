"""
Food and nutrition lookups: AI estimates, free-text and photo meal analysis,
food database search and barcode products.

Without an AI key or food database keys the estimate and search endpoints
answer from small built-in tables.
"""

import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from adapters import food_api_adapter, openai_adapter
from app.exceptions import LifeTrackError, ServiceValidationError
from domain.schemas.ai_schemas import FoodImageRequest, NutritionEstimateRequest
from services import nutrition_calculator as calc

logger = logging.getLogger("lifetrack.services.nutrition")

GRAM_UNITS = ("g", "gram", "grams")
MIN_SEARCH_LENGTH = 2
MAX_SEARCH_RESULTS = 15
BARCODE_RE = re.compile(r"^\d{8,14}$")

MOCK_ESTIMATES = {
    "chicken breast": {"calories": 165, "protein": 31, "carbs": 0, "fat": 3.6, "confidence": 0.9},
    "brown rice": {"calories": 111, "protein": 2.6, "carbs": 23, "fat": 0.9, "confidence": 0.85},
    "broccoli": {"calories": 34, "protein": 2.8, "carbs": 7, "fat": 0.4, "confidence": 0.88},
    "banana": {"calories": 89, "protein": 1.1, "carbs": 23, "fat": 0.3, "confidence": 0.92},
    "greek yogurt": {"calories": 59, "protein": 10, "carbs": 3.6, "fat": 0.4, "confidence": 0.87},
}
DEFAULT_ESTIMATE = {"calories": 150, "protein": 8, "carbs": 15, "fat": 6, "confidence": 0.3}

MOCK_FOODS = [
    {"id": "1", "name": "Chicken breast", "calories_per_100g": 165, "protein_per_100g": 31, "carbs_per_100g": 0, "fat_per_100g": 3.6, "fiber_per_100g": 0, "brand": None, "category": "Meat", "image": None},
    {"id": "2", "name": "Brown rice", "calories_per_100g": 111, "protein_per_100g": 2.6, "carbs_per_100g": 23, "fat_per_100g": 0.9, "fiber_per_100g": 1.8, "brand": None, "category": "Grains", "image": None},
    {"id": "3", "name": "Broccoli", "calories_per_100g": 34, "protein_per_100g": 2.8, "carbs_per_100g": 7, "fat_per_100g": 0.4, "fiber_per_100g": 2.6, "brand": None, "category": "Vegetables", "image": None},
    {"id": "4", "name": "Salmon fillet", "calories_per_100g": 208, "protein_per_100g": 25, "carbs_per_100g": 0, "fat_per_100g": 12, "fiber_per_100g": 0, "brand": None, "category": "Fish", "image": None},
    {"id": "5", "name": "Greek yogurt", "calories_per_100g": 59, "protein_per_100g": 10, "carbs_per_100g": 3.6, "fat_per_100g": 0.4, "fiber_per_100g": 0, "brand": None, "category": "Dairy", "image": None},
    {"id": "6", "name": "Banana", "calories_per_100g": 89, "protein_per_100g": 1.1, "carbs_per_100g": 23, "fat_per_100g": 0.3, "fiber_per_100g": 2.6, "brand": None, "category": "Fruit", "image": None},
    {"id": "7", "name": "Almonds", "calories_per_100g": 579, "protein_per_100g": 21, "carbs_per_100g": 22, "fat_per_100g": 50, "fiber_per_100g": 12, "brand": None, "category": "Nuts", "image": None},
    {"id": "8", "name": "Sweet potato", "calories_per_100g": 86, "protein_per_100g": 1.6, "carbs_per_100g": 20, "fat_per_100g": 0.1, "fiber_per_100g": 3, "brand": None, "category": "Vegetables", "image": None},
    {"id": "9", "name": "Egg", "calories_per_100g": 155, "protein_per_100g": 13, "carbs_per_100g": 1.1, "fat_per_100g": 11, "fiber_per_100g": 0, "brand": None, "category": "Protein", "image": None},
    {"id": "10", "name": "Avocado", "calories_per_100g": 160, "protein_per_100g": 2, "carbs_per_100g": 9, "fat_per_100g": 15, "fiber_per_100g": 7, "brand": None, "category": "Fruit", "image": None},
]

ESTIMATE_SYSTEM_PROMPT = (
    "You are a nutrition expert with access to comprehensive food databases. "
    "Provide accurate nutritional estimates and always return valid JSON."
)

ANALYSIS_SYSTEM_PROMPT = """You are a nutritionist. Identify every food item in the meal and estimate its nutrition.
Answer with JSON only:
{
  "items": [{"name": string, "quantity": number, "unit": string,
             "calories": number, "protein": number, "carbs": number, "fat": number}],
  "totals": {"calories": number, "protein": number, "carbs": number, "fat": number},
  "notes": [string]
}
Be realistic, assume typical portions when the description is vague and round to one decimal."""


def _regex_number(text: str, pattern: str) -> float:
    match = re.search(pattern, text, re.IGNORECASE)
    return float(match.group(1)) if match else 0.0


def _as_number(value: Any) -> float:
    """A model value as a float; text such as "about 165 kcal" keeps its first number."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    match = re.search(r"\d+(?:\.\d+)?", str(value or ""))
    return float(match.group(0)) if match else 0.0


def parse_estimate_text(text: str) -> Dict[str, float]:
    """
    Per-100g values from a model answer.

    JSON is preferred; otherwise numbers following "calories", "protein",
    "carbs" and "fat" are picked out of the prose.
    """
    data = openai_adapter.extract_json_object(text)
    if data:
        return {
            "calories": _as_number(data.get("calories_per_100g") or data.get("caloriesPer100g")),
            "protein": _as_number(data.get("protein_per_100g") or data.get("proteinPer100g")),
            "carbs": _as_number(data.get("carbs_per_100g") or data.get("carbsPer100g")),
            "fat": _as_number(data.get("fat_per_100g") or data.get("fatPer100g")),
            "confidence": min(_as_number(data.get("confidence")) or 0.7, 1.0),
            "notes": data.get("notes"),
        }
    return {
        "calories": _regex_number(text, r"calories?[:\s]+(\d+\.?\d*)") or DEFAULT_ESTIMATE["calories"],
        "protein": _regex_number(text, r"protein[:\s]+(\d+\.?\d*)") or DEFAULT_ESTIMATE["protein"],
        "carbs": _regex_number(text, r"carb[s\w]*[:\s]+(\d+\.?\d*)") or DEFAULT_ESTIMATE["carbs"],
        "fat": _regex_number(text, r"fat[:\s]+(\d+\.?\d*)") or DEFAULT_ESTIMATE["fat"],
        "confidence": 0.7,
        "notes": "Estimated from AI analysis",
    }


def _mock_estimate(food_name: str) -> Dict[str, float]:
    name = food_name.lower()
    for key, values in MOCK_ESTIMATES.items():
        if key in name or name in key:
            return dict(values)
    return dict(DEFAULT_ESTIMATE)


def _num(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def clean_meal_analysis(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize item lists; totals are recomputed from the items when missing."""
    items = []
    for item in raw.get("items") or []:
        if not isinstance(item, dict) or not item.get("name"):
            continue
        macros = item.get("macros") if isinstance(item.get("macros"), dict) else item
        items.append({
            "name": str(item["name"]),
            "quantity": item.get("quantity"),
            "unit": item.get("unit"),
            "calories": _num(item.get("calories")),
            "protein": _num(macros.get("protein")),
            "carbs": _num(macros.get("carbs")),
            "fat": _num(macros.get("fat")),
        })

    totals = raw.get("totals")
    if isinstance(totals, dict) and totals.get("calories") is not None:
        macros = totals.get("macros") if isinstance(totals.get("macros"), dict) else totals
        totals = {
            "calories": _num(totals.get("calories")),
            "protein": _num(macros.get("protein")),
            "carbs": _num(macros.get("carbs")),
            "fat": _num(macros.get("fat")),
        }
    else:
        totals = {
            key: calc.round1(sum(i[key] for i in items))
            for key in ("calories", "protein", "carbs", "fat")
        }

    notes = raw.get("notes") or []
    if isinstance(notes, str):
        notes = [notes]
    return {"items": items, "totals": totals, "notes": [str(n) for n in notes]}


class NutritionService:
    @staticmethod
    def estimate(data: NutritionEstimateRequest) -> Dict[str, Any]:
        """
        Estimate nutrition per 100 g for a food, scaled to the quantity when it is in grams.

        The ``method`` field tells where the values came from: ``mock_estimation``
        (no AI key), ``openai_estimation`` or ``fallback`` (AI call failed).
        """
        notes = None
        error = None
        if not openai_adapter.is_configured():
            values, method = _mock_estimate(data.food_name), "mock_estimation"
        else:
            prompt = (
                f"Estimate the nutritional information for: {data.food_name}\n"
                f"Quantity: {data.quantity:g} {data.unit}\n"
                "Return JSON with calories_per_100g, protein_per_100g, carbs_per_100g, "
                "fat_per_100g, confidence (0-1) and notes."
            )
            try:
                text = openai_adapter.chat_text(
                    [
                        {"role": "system", "content": ESTIMATE_SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                    temperature=0.1,
                    max_tokens=500,
                )
                values, method = parse_estimate_text(text), "openai_estimation"
                notes = values.pop("notes", None)
            except LifeTrackError as exc:
                logger.warning("Nutrition estimate failed for %r: %s", data.food_name, exc)
                values, method = dict(DEFAULT_ESTIMATE), "fallback"
                error = "AI estimation service unavailable"
                notes = "AI estimation unavailable. Using default values - please verify manually."

        confidence = values.get("confidence", DEFAULT_ESTIMATE["confidence"])
        if notes is None:
            verdict = "Low confidence - please verify manually." if confidence < 0.5 else "Reasonably confident estimation."
            notes = f"Estimated nutrition values for {data.food_name}. {verdict}"

        total = None
        if data.unit.lower() in GRAM_UNITS:
            total = {"calories": calc.calculate_calories(data.quantity, values["calories"])}
            total.update(calc.calculate_macros(data.quantity, values["protein"], values["carbs"], values["fat"]))

        estimation = {
            "food_name": data.food_name,
            "quantity": data.quantity,
            "unit": data.unit,
            "nutrition": {
                "calories_per_100g": values["calories"],
                "protein_per_100g": values["protein"],
                "carbs_per_100g": values["carbs"],
                "fat_per_100g": values["fat"],
                "confidence": confidence,
            },
            "total": total,
            "notes": notes,
            "method": method,
        }
        if error:
            estimation["error"] = error
        return {"success": True, "estimation": estimation}

    @staticmethod
    def analyze_text(text: str) -> Dict[str, Any]:
        """Nutrition breakdown of a free-text meal description (at most 500 characters)."""
        raw = openai_adapter.chat_json(
            ANALYSIS_SYSTEM_PROMPT,
            f'Analyze this food description: "{text}"',
            temperature=0.3,
            max_tokens=1500,
        )
        return {
            "success": True,
            "analysis": clean_meal_analysis(raw),
            "original_text": text,
            "analyzed_at": datetime.utcnow().isoformat(),
        }

    @staticmethod
    def analyze_image(data: FoodImageRequest) -> Dict[str, Any]:
        image_url = data.image_url or openai_adapter.image_data_url(data.image_base64, data.mime_type)
        raw = openai_adapter.vision_json(
            ANALYSIS_SYSTEM_PROMPT + "\nAnalyze the meal in this photo.",
            image_url,
            max_tokens=2000,
            temperature=0.3,
        )
        return {
            "success": True,
            "analysis": clean_meal_analysis(raw),
            "analyzed_at": datetime.utcnow().isoformat(),
        }

    @staticmethod
    def search_foods(query: Optional[str]) -> Dict[str, Any]:
        """Food database search; falls back to the built-in list without keys or on failure."""
        term = (query or "").strip()
        if len(term) < MIN_SEARCH_LENGTH:
            raise ServiceValidationError("Search query must be at least 2 characters")

        if food_api_adapter.edamam_food_configured():
            try:
                foods = food_api_adapter.search_foods(term, MAX_SEARCH_RESULTS)
                return {"source": "edamam", "foods": foods}
            except LifeTrackError as exc:
                logger.warning("Edamam food search failed, using mock foods: %s", exc)

        lowered = term.lower()
        foods: List[Dict[str, Any]] = [dict(f) for f in MOCK_FOODS if lowered in f["name"].lower()]
        return {"source": "mock", "foods": foods}

    @staticmethod
    def get_barcode_product(barcode: Optional[str]) -> Dict[str, Any]:
        code = (barcode or "").strip()
        if not BARCODE_RE.match(code):
            raise ServiceValidationError("Barcode must be 8-14 digits")
        return food_api_adapter.get_product(code)
