"""HTTP adapter for third-party food data: Edamam (foods, recipes) and OpenFoodFacts.

Functions return plain dicts in LifeTrack field names and raise
UpstreamServiceError / UpstreamTimeoutError on transport or status failures.
Callers decide whether to fall back to canned data.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from app.config import settings
from app.exceptions import NotFoundError, UpstreamServiceError, UpstreamTimeoutError

logger = logging.getLogger("lifetrack.food_api")

EDAMAM_FOOD_URL = "https://api.edamam.com/api/food-database/v2/parser"
EDAMAM_RECIPE_URL = "https://api.edamam.com/api/recipes/v2"
USER_AGENT = "LifeTrack/1.0 (+nutrition)"


def _get_json(url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    try:
        response = httpx.get(
            url,
            params=params,
            timeout=settings.http_timeout_sec,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        )
        response.raise_for_status()
        return response.json()
    except httpx.TimeoutException as exc:
        raise UpstreamTimeoutError(f"Request to {url} timed out") from exc
    except httpx.HTTPError as exc:
        raise UpstreamServiceError(f"Request to {url} failed: {exc}") from exc
    except ValueError as exc:
        raise UpstreamServiceError(f"Invalid JSON from {url}") from exc


def _round1(value: Any) -> float:
    try:
        return round(float(value or 0) * 10) / 10
    except (TypeError, ValueError):
        return 0.0


# ------------------ Edamam food database ------------------
def edamam_food_configured() -> bool:
    return bool(settings.edamam_food_app_id and settings.edamam_food_app_key)


def _map_edamam_food(food: Dict[str, Any]) -> Dict[str, Any]:
    nutrients = food.get("nutrients") or {}
    return {
        "id": food.get("foodId"),
        "name": food.get("label"),
        "calories_per_100g": round(float(nutrients.get("ENERC_KCAL") or 0)),
        "protein_per_100g": _round1(nutrients.get("PROCNT")),
        "carbs_per_100g": _round1(nutrients.get("CHOCDF")),
        "fat_per_100g": _round1(nutrients.get("FAT")),
        "fiber_per_100g": _round1(nutrients.get("FIBTG")),
        "brand": food.get("brand"),
        "category": food.get("category") or "Unknown",
        "image": food.get("image"),
    }


def search_foods(query: str, limit: int = 15) -> List[Dict[str, Any]]:
    """Search the Edamam food database; parsed matches first, then hints, deduplicated by name."""
    data = _get_json(
        EDAMAM_FOOD_URL,
        params={
            "app_id": settings.edamam_food_app_id,
            "app_key": settings.edamam_food_app_key,
            "ingr": query,
            "nutrition-type": "cooking",
        },
    )
    candidates = [item.get("food") or {} for item in data.get("parsed") or []]
    candidates += [item.get("food") or {} for item in (data.get("hints") or [])[:10]]

    seen = set()
    foods = []
    for food in candidates:
        mapped = _map_edamam_food(food)
        key = (mapped["name"] or "").strip().lower()
        if not key or key in seen:
            continue
        seen.add(key)
        foods.append(mapped)
    logger.info("Edamam returned %d foods for %r", len(foods), query)
    return foods[:limit]


# ------------------ Edamam recipe search ------------------
def edamam_recipes_configured() -> bool:
    return bool(settings.edamam_recipe_app_id and settings.edamam_recipe_app_key)


def search_recipes(
    query: str,
    meal_type: Optional[str] = None,
    cuisine_type: Optional[str] = None,
    diet: Optional[str] = None,
    health: Optional[str] = None,
) -> List[Dict[str, Any]]:
    params: Dict[str, Any] = {
        "type": "public",
        "q": query,
        "app_id": settings.edamam_recipe_app_id,
        "app_key": settings.edamam_recipe_app_key,
    }
    if meal_type:
        params["mealType"] = meal_type
    if cuisine_type:
        params["cuisineType"] = cuisine_type
    if diet:
        params["diet"] = diet
    if health:
        params["health"] = health

    data = _get_json(EDAMAM_RECIPE_URL, params=params)
    results = []
    for hit in data.get("hits") or []:
        recipe = hit.get("recipe") or {}
        results.append(
            {
                "external_id": recipe.get("uri"),
                "title": recipe.get("label"),
                "image_url": recipe.get("image"),
                "source": recipe.get("source"),
                "url": recipe.get("url"),
                "servings": recipe.get("yield"),
                "calories": round(float(recipe.get("calories") or 0)),
                "total_time": recipe.get("totalTime"),
                "ingredient_lines": recipe.get("ingredientLines") or [],
                "cuisine_type": recipe.get("cuisineType") or [],
                "meal_type": recipe.get("mealType") or [],
                "diet_labels": recipe.get("dietLabels") or [],
                "health_labels": recipe.get("healthLabels") or [],
            }
        )
    return results


# ------------------ OpenFoodFacts ------------------
def get_product(barcode: str) -> Dict[str, Any]:
    """Look up a product by barcode.

    Raises:
        NotFoundError: OpenFoodFacts does not know the barcode (status 0)
    """
    url = f"{settings.openfoodfacts_base_url.rstrip('/')}/api/v0/product/{barcode}.json"
    data = _get_json(url)
    if data.get("status") == 0 or not data.get("product"):
        raise NotFoundError("Product not found")

    product = data["product"]
    nutriments = product.get("nutriments") or {}
    calories = nutriments.get("energy-kcal_100g")
    if calories is None and nutriments.get("energy_100g") is not None:
        # energy_100g is reported in kJ
        calories = float(nutriments["energy_100g"]) / 4.184

    return {
        "barcode": barcode,
        "name": product.get("product_name") or product.get("generic_name") or "Unknown product",
        "brand": product.get("brands"),
        "quantity": product.get("quantity"),
        "image_url": product.get("image_url"),
        "nutrition": {
            "calories": round(float(calories or 0)),
            "protein": _round1(nutriments.get("proteins_100g")),
            "carbs": _round1(nutriments.get("carbohydrates_100g")),
            "fat": _round1(nutriments.get("fat_100g")),
            "fiber": _round1(nutriments.get("fiber_100g")),
            "sugar": _round1(nutriments.get("sugars_100g")),
            "salt": _round1(nutriments.get("salt_100g")),
        },
        "nutri_score": product.get("nutriscore_grade") or product.get("nutrition_grades"),
        "ingredients": product.get("ingredients_text"),
        "allergens": product.get("allergens_tags") or [],
        "source": "openfoodfacts",
    }
