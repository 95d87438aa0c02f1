from datetime import datetime
from typing import Any, Dict, List, Optional
import logging
import re

from pymongo.database import Database

from adapters import food_api_adapter, openai_adapter
from app.exceptions import NotFoundError, LifeTrackError
from domain.mappers import DocumentMapper
from domain.schemas.recipe_schemas import RecipeCreate, RecipeGenerateRequest, RecipeUpdate
from repositories import RecipeRepository

logger = logging.getLogger("lifetrack.services.recipes")

MAX_GENERATED_RECIPES = 5
DEFAULT_MINUTES = 30

RECIPE_SYSTEM_PROMPT = (
    "You are a professional chef and recipe developer. Always answer with valid JSON "
    "of the form {\"recipes\": [...]}. Give every ingredient an exact amount and unit "
    "and estimate calories per serving for every recipe."
)

RECIPE_JSON_SHAPE = """{
  "recipes": [
    {
      "title": "Recipe title",
      "description": "One or two sentences",
      "ingredients": [{"name": "chicken breast", "amount": "300", "unit": "g"}],
      "instructions": ["Step 1 ...", "Step 2 ..."],
      "cookingTime": "30 minutes",
      "servings": 4,
      "difficulty": "easy|medium|hard",
      "category": "breakfast|lunch|dinner|snack|dessert",
      "caloriesPerServing": 350,
      "protein": 25,
      "carbs": 30,
      "fat": 12,
      "tags": ["tag"]
    }
  ]
}"""

FALLBACK_EXTERNAL_RECIPES = [
    {
        "external_id": "fallback-1",
        "title": "Healthy chicken salad",
        "image_url": "https://images.unsplash.com/photo-1512621776951-a57141f2eefd?w=300&h=200&fit=crop",
        "source": "LifeTrack",
        "url": "",
        "servings": 2,
        "calories": 350,
        "total_time": 20,
        "ingredient_lines": ["2 chicken breasts", "1 cup mixed salad", "1 tbsp olive oil", "1/2 avocado"],
        "cuisine_type": ["american"],
        "meal_type": ["lunch"],
        "diet_labels": [],
        "health_labels": ["low-carb"],
    },
    {
        "external_id": "fallback-2",
        "title": "Grilled chicken breast",
        "image_url": "https://images.unsplash.com/photo-1532550907401-a500c9a57435?w=300&h=200&fit=crop",
        "source": "LifeTrack",
        "url": "",
        "servings": 4,
        "calories": 450,
        "total_time": 25,
        "ingredient_lines": ["4 chicken breasts", "2 tbsp olive oil", "1 tsp salt", "1 tsp black pepper"],
        "cuisine_type": ["american"],
        "meal_type": ["dinner"],
        "diet_labels": [],
        "health_labels": ["high-protein"],
    },
    {
        "external_id": "fallback-3",
        "title": "Oatmeal with banana",
        "image_url": None,
        "source": "LifeTrack",
        "url": "",
        "servings": 1,
        "calories": 320,
        "total_time": 10,
        "ingredient_lines": ["50 g rolled oats", "200 ml milk", "1 banana", "1 tsp honey"],
        "cuisine_type": ["world"],
        "meal_type": ["breakfast"],
        "diet_labels": ["balanced"],
        "health_labels": ["vegetarian"],
    },
    {
        "external_id": "fallback-4",
        "title": "Salmon with broccoli and rice",
        "image_url": None,
        "source": "LifeTrack",
        "url": "",
        "servings": 2,
        "calories": 520,
        "total_time": 30,
        "ingredient_lines": ["2 salmon fillets", "200 g broccoli", "150 g brown rice", "1 lemon"],
        "cuisine_type": ["nordic"],
        "meal_type": ["dinner"],
        "diet_labels": ["high-protein"],
        "health_labels": ["pescatarian"],
    },
]


def parse_time_to_minutes(value: Any) -> int:
    """Minutes from values like ``45``, ``"30 minutes"`` or ``"1 hour"``; first integer wins, default 30."""
    if isinstance(value, bool):
        return DEFAULT_MINUTES
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        match = re.search(r"(\d+)", value)
        if match:
            return int(match.group(1))
    return DEFAULT_MINUTES


def _as_number(value: Any, default: float = 0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def normalize_generated_recipe(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Map a recipe produced by the language model onto the stored recipe shape.

    Ingredients become ``{"name", "quantity": "<amount> <unit>", "grams"}``,
    instructions become steps and the cooking time string is parsed to minutes.
    """
    ingredients = []
    for ing in raw.get("ingredients") or []:
        if isinstance(ing, str):
            ingredients.append({"name": ing, "quantity": "", "grams": None})
            continue
        if not isinstance(ing, dict) or not ing.get("name"):
            continue
        quantity = " ".join(str(p) for p in (ing.get("amount"), ing.get("unit")) if p not in (None, "")).strip()
        grams = _as_number(ing.get("amount"), None) if str(ing.get("unit", "")).lower() in ("g", "gram", "grams") else None
        ingredients.append({"name": str(ing["name"]), "quantity": quantity, "grams": grams})

    steps = []
    for s in raw.get("instructions") or raw.get("steps") or []:
        if isinstance(s, dict) and s.get("step"):
            steps.append({"step": str(s["step"]), "ingredient": s.get("ingredient")})
        elif s and not isinstance(s, dict):
            steps.append({"step": str(s)})
    minutes = parse_time_to_minutes(raw.get("cookingTime") or raw.get("cooking_time"))
    tags = [str(t).lower().strip() for t in raw.get("tags") or [] if str(t).strip()]

    return {
        "title": str(raw.get("title") or "Recipe").strip(),
        "description": raw.get("description") or "",
        "ingredients": ingredients,
        "steps": steps,
        "calories_per_serving": _as_number(raw.get("caloriesPerServing") or raw.get("calories")),
        "protein_per_serving": _as_number(raw.get("proteinPerServing") or raw.get("protein")),
        "carbs_per_serving": _as_number(raw.get("carbsPerServing") or raw.get("carbs")),
        "fat_per_serving": _as_number(raw.get("fatPerServing") or raw.get("fat")),
        "fiber_per_serving": _as_number(raw.get("fiberPerServing") or raw.get("fiber")),
        "servings": max(1, int(_as_number(raw.get("servings"), 1))),
        "tags": tags,
        "image_url": None,
        "prep_time": minutes,
        "cook_time": minutes,
        "category": raw.get("category"),
        "difficulty": raw.get("difficulty"),
    }


class RecipeService:
    @staticmethod
    def list_recipes(
        db: Database,
        user: Dict[str, Any],
        search: Optional[str] = None,
        tags: Optional[str] = None,
        meal_type: Optional[str] = None,
        limit: int = 20,
    ) -> List[Dict[str, Any]]:
        """
        Search the user's recipes.

        Args:
            search: case-insensitive title fragment
            tags: comma separated tags (matched lowercase, any of them)
            meal_type: treated as one more tag
            limit: maximum results
        """
        tag_list = [t.strip().lower() for t in (tags or "").split(",") if t.strip()]
        if meal_type:
            tag_list.append(meal_type.strip().lower())
        return RecipeRepository(db).search(user["_id"], search, tag_list or None, limit)

    @staticmethod
    def get_recipe(db: Database, user: Dict[str, Any], recipe_id: str) -> Dict[str, Any]:
        recipe = RecipeRepository(db).get_owned(recipe_id, user["_id"])
        if not recipe:
            raise NotFoundError("Recipe not found")
        return recipe

    @staticmethod
    def create_recipe(db: Database, user: Dict[str, Any], data: RecipeCreate) -> Dict[str, Any]:
        document = DocumentMapper.to_storage(data.model_dump())
        document["user_id"] = user["_id"]
        recipe = RecipeRepository(db).create(document)
        logger.info("Created recipe %s for user %s", recipe["_id"], user["_id"])
        return recipe

    @staticmethod
    def save_generated(db: Database, user_id, recipe: Dict[str, Any], external_id: str) -> Dict[str, Any]:
        """Persist a normalized AI recipe for the user."""
        document = dict(recipe)
        document["user_id"] = user_id
        document["external_id"] = external_id
        return RecipeRepository(db).create(document)

    @staticmethod
    def update_recipe(db: Database, user: Dict[str, Any], recipe_id: str, data: RecipeUpdate) -> Dict[str, Any]:
        fields = DocumentMapper.to_storage(data.model_dump(exclude={"external_id"}))
        updated = RecipeRepository(db).update_owned(recipe_id, user["_id"], fields)
        if not updated:
            raise NotFoundError("Recipe not found or unauthorized")
        return updated

    @staticmethod
    def delete_recipe(db: Database, user: Dict[str, Any], recipe_id: str) -> None:
        if not RecipeRepository(db).delete_owned(recipe_id, user["_id"]):
            raise NotFoundError("Recipe not found or unauthorized")

    @staticmethod
    def generate_recipes(user: Dict[str, Any], data: RecipeGenerateRequest) -> Dict[str, Any]:
        """
        Generate recipes that use all given ingredients. Results are returned, not stored.

        ``count`` is capped at 5 per call; ``offset`` asks the model for ideas
        different from the ones already shown.
        """
        count = min(data.count, MAX_GENERATED_RECIPES)
        ingredient_list = ", ".join(data.ingredients)
        language = user.get("language") or "en"
        prompt = (
            f"Create {count} different, creative recipes that each use ALL of these ingredients: "
            f"{ingredient_list}.\n"
            f"This is request number {data.offset // max(count, 1) + 1} for these ingredients; "
            f"avoid the most obvious dishes when it is not the first.\n"
            f"Write all text in the language with ISO code '{language}'.\n"
            f"Answer with JSON exactly in this shape:\n{RECIPE_JSON_SHAPE}"
        )
        result = openai_adapter.chat_json(
            RECIPE_SYSTEM_PROMPT, prompt, temperature=0.7, max_tokens=3000
        )
        raw_recipes = result.get("recipes") or []
        if not isinstance(raw_recipes, list):
            raw_recipes = []

        stamp = int(datetime.utcnow().timestamp() * 1000)
        recipes = []
        for index, raw in enumerate(raw_recipes[:count]):
            if not isinstance(raw, dict):
                continue
            recipe = normalize_generated_recipe(raw)
            recipe["external_id"] = f"ai-recipe-{stamp}-{index}"
            recipe["source"] = "openai"
            recipe["required_ingredients"] = data.ingredients
            recipes.append(recipe)
        logger.info("Generated %d recipes for user %s", len(recipes), user["_id"])
        return {
            "success": True,
            "recipes": recipes,
            "total_generated": len(recipes),
            "ingredients": data.ingredients,
            "offset": data.offset,
        }

    @staticmethod
    def search_external(
        query: str,
        meal_type: Optional[str] = None,
        cuisine_type: Optional[str] = None,
        diet: Optional[str] = None,
        health: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Search the Edamam recipe API; without keys or on failure return the built-in list."""
        if food_api_adapter.edamam_recipes_configured():
            try:
                recipes = food_api_adapter.search_recipes(query, meal_type, cuisine_type, diet, health)
                return {"source": "edamam", "recipes": recipes}
            except LifeTrackError as exc:
                logger.warning("Edamam recipe search failed, using fallback: %s", exc)
        else:
            logger.info("Edamam recipe keys not configured, using fallback recipes")

        term = query.lower()
        matches = [
            r for r in FALLBACK_EXTERNAL_RECIPES
            if term in r["title"].lower() or any(term in line.lower() for line in r["ingredient_lines"])
        ]
        return {"source": "fallback", "recipes": matches}
