from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional
import logging

from pymongo.database import Database

from adapters import openai_adapter
from app.config import settings
from app.exceptions import NotFoundError, ServiceUnavailableError, UpstreamTimeoutError
from domain.enums import MealPlanType, PlanMealType
from domain.mappers import DocumentMapper
from domain.schemas.meal_plan_schemas import (
    MealPlanCreate,
    MealPlanMealUpdate,
    MealPlanPreferences,
    MealPlanUpdate,
)
from repositories import MealPlanRepository, RecipeRepository, to_object_id
from services.recipe_service import RecipeService, normalize_generated_recipe

logger = logging.getLogger("lifetrack.services.meal_plans")

PLAN_DAYS = {
    MealPlanType.DAILY: 1,
    MealPlanType.WEEKLY: 7,
    MealPlanType.MONTHLY: 30,
    MealPlanType.CUSTOM: 7,
}
DAILY_MEALS = (
    PlanMealType.BREAKFAST.value,
    PlanMealType.LUNCH.value,
    PlanMealType.DINNER.value,
    PlanMealType.DESSERT.value,
)

MEAL_PLAN_SYSTEM_PROMPT = (
    "You are a nutrition coach. Answer with JSON only. When you receive a list of "
    "meals generated earlier, never repeat them: vary ingredients, cooking methods "
    "and cuisines. Every element of 'instructions' is an object with 'step' and "
    "'ingredient' fields."
)

DAY_JSON_SHAPE = """{
  "meals": [
    {
      "meal_type": "breakfast",
      "recipe": {
        "title": "Name",
        "description": "Short description",
        "ingredients": [{"name": "oats", "amount": "60", "unit": "g"}],
        "instructions": [{"step": "What to do", "ingredient": "60 g oats, 200 ml milk"}],
        "caloriesPerServing": 350,
        "proteinPerServing": 20,
        "carbsPerServing": 30,
        "fatPerServing": 10,
        "fiberPerServing": 5,
        "servings": 2,
        "cookingTime": "30",
        "category": "breakfast",
        "difficulty": "easy",
        "tags": ["tag"]
      }
    }
  ]
}"""


def build_day_prompt(
    preferences: MealPlanPreferences, day_number: int, total_days: int, previous_titles: List[str]
) -> str:
    """Prompt for one plan day; earlier titles are listed so the model avoids repeats."""
    lines = [
        f"Create the meals for day {day_number} of a {total_days}-day meal plan: "
        "breakfast, lunch, dinner and dessert, four clearly different recipes."
    ]
    constraints = (
        ("Avoid", preferences.dislikes),
        ("Never use these ingredients", preferences.excluded_ingredients),
        ("Allergies", preferences.allergies),
        ("Dietary restrictions", preferences.dietary_restrictions),
    )
    for label, values in constraints:
        if values:
            lines.append(f"- {label}: {', '.join(values)}")
    if preferences.calorie_target:
        lines.append(f"- Daily calorie target: {preferences.calorie_target} kcal")
    if preferences.protein_target:
        lines.append(f"- Daily protein target: {preferences.protein_target} g")
    if previous_titles:
        lines.append(
            "\nMeals already in the plan (do NOT repeat them or their main ingredient):\n"
            + ", ".join(previous_titles)
        )
    lines.append(f"\nKeep recipes short. Answer with JSON in this shape:\n{DAY_JSON_SHAPE}")
    return "\n".join(lines)


class MealPlanService:
    @staticmethod
    def _populate(db: Database, user: Dict[str, Any], plan: Dict[str, Any]) -> Dict[str, Any]:
        """Embed each meal's recipe document under ``recipe``."""
        recipe_ids = [m.get("recipe_id") for d in plan.get("days", []) for m in d.get("meals", []) if m.get("recipe_id")]
        recipes = {r["_id"]: r for r in RecipeRepository(db).get_many_owned(recipe_ids, user["_id"])}
        for day in plan.get("days", []):
            for meal in day.get("meals", []):
                meal["recipe"] = recipes.get(to_object_id(meal.get("recipe_id")))
        return plan

    @staticmethod
    def list_plans(
        db: Database, user: Dict[str, Any], active: Optional[bool] = None, populate: bool = False
    ) -> List[Dict[str, Any]]:
        plans = MealPlanRepository(db).list_for_user(user["_id"], active)
        if populate:
            plans = [MealPlanService._populate(db, user, p) for p in plans]
        return plans

    @staticmethod
    def get_plan(db: Database, user: Dict[str, Any], plan_id: str, populate: bool = False) -> Dict[str, Any]:
        plan = MealPlanRepository(db).get_owned(plan_id, user["_id"])
        if not plan:
            raise NotFoundError("Meal plan not found")
        return MealPlanService._populate(db, user, plan) if populate else plan

    @staticmethod
    def create_plan(db: Database, user: Dict[str, Any], data: MealPlanCreate) -> Dict[str, Any]:
        """
        Create a meal plan, optionally filled day by day by the language model.

        Each generated recipe is saved to the user's recipes as soon as its day
        is generated, so recipes of earlier days remain if a later day fails.

        Raises:
            ServiceUnavailableError: AI requested but not configured
            UpstreamTimeoutError: "AI generation timed out on day N/<total>"
        """
        total_days = PLAN_DAYS[data.type]
        start = data.start_date
        end = start + timedelta(days=total_days - 1)

        if data.generate_with_ai:
            if not openai_adapter.is_configured():
                raise ServiceUnavailableError("AI service is not configured")
            days = MealPlanService._generate_days(db, user, data.preferences, start, total_days)
        else:
            days = [
                {"day_number": i + 1, "date": (start + timedelta(days=i)).isoformat(), "meals": []}
                for i in range(total_days)
            ]

        plan = MealPlanRepository(db).create({
            "user_id": user["_id"],
            "name": data.name,
            "description": data.description,
            "type": data.type.value,
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "days": days,
            "preferences": data.preferences.model_dump(),
            "is_active": True,
            "generated_with_ai": data.generate_with_ai,
        })
        logger.info("Created %s meal plan %s (%d days) for user %s", data.type.value, plan["_id"], total_days, user["_id"])
        return MealPlanService._populate(db, user, plan)

    @staticmethod
    def _generate_days(
        db: Database, user: Dict[str, Any], preferences: MealPlanPreferences, start: date, total_days: int
    ) -> List[Dict[str, Any]]:
        days: List[Dict[str, Any]] = []
        previous_titles: List[str] = []
        stamp = int(datetime.utcnow().timestamp() * 1000)

        for index in range(total_days):
            day_number = index + 1
            logger.info("Generating meal plan day %d/%d", day_number, total_days)
            prompt = build_day_prompt(preferences, day_number, total_days, previous_titles)
            try:
                result = openai_adapter.chat_json(
                    MEAL_PLAN_SYSTEM_PROMPT,
                    prompt,
                    temperature=0.8,
                    max_tokens=3000,
                    timeout=settings.meal_plan_timeout_sec,
                )
            except UpstreamTimeoutError as exc:
                raise UpstreamTimeoutError(
                    f"AI generation timed out on day {day_number}/{total_days}"
                ) from exc

            meals = MealPlanService._extract_meals(result)
            day_meals = []
            for raw_meal in meals:
                meal_type = str(raw_meal.get("meal_type") or raw_meal.get("mealType") or "").lower()
                raw_recipe = raw_meal.get("recipe")
                if meal_type not in DAILY_MEALS or not isinstance(raw_recipe, dict):
                    continue
                recipe = normalize_generated_recipe(raw_recipe)
                recipe["category"] = recipe.get("category") or meal_type
                saved = RecipeService.save_generated(
                    db, user["_id"], recipe, f"ai-meal-plan-{stamp}-{day_number}-{meal_type}"
                )
                previous_titles.append(recipe["title"])
                day_meals.append({
                    "recipe_id": saved["_id"],
                    "recipe_title": recipe["title"],
                    "meal_type": meal_type,
                    "completed": False,
                    "completed_at": None,
                    "notes": "",
                })
            days.append({
                "day_number": day_number,
                "date": (start + timedelta(days=index)).isoformat(),
                "meals": day_meals,
            })
        return days

    @staticmethod
    def _extract_meals(result: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Accept ``{"meals": [...]}`` or the ``{"days": [{"meals": [...]}]}`` shape."""
        meals = result.get("meals")
        if meals is None and isinstance(result.get("days"), list) and result["days"]:
            first = result["days"][0]
            meals = first.get("meals") if isinstance(first, dict) else None
        return [m for m in meals or [] if isinstance(m, dict)]

    @staticmethod
    def update_plan(db: Database, user: Dict[str, Any], plan_id: str, data: MealPlanUpdate) -> Dict[str, Any]:
        fields = data.model_dump(exclude_unset=True, exclude_none=True, exclude={"days"})
        if data.days is not None:
            fields["days"] = [day.model_dump() for day in data.days]
        fields = DocumentMapper.to_storage(fields)
        for day in fields.get("days", []):
            for meal in day.get("meals", []):
                meal["recipe_id"] = to_object_id(meal.get("recipe_id"))
        repo = MealPlanRepository(db)
        plan = repo.update_owned(plan_id, user["_id"], fields) if fields else repo.get_owned(plan_id, user["_id"])
        if not plan:
            raise NotFoundError("Meal plan not found")
        return MealPlanService._populate(db, user, plan)

    @staticmethod
    def update_meal(db: Database, user: Dict[str, Any], plan_id: str, data: MealPlanMealUpdate) -> Dict[str, Any]:
        """Update one meal of one day: completion state, notes or the linked recipe."""
        repo = MealPlanRepository(db)
        plan = repo.get_owned(plan_id, user["_id"])
        if not plan:
            raise NotFoundError("Meal plan not found")

        day = next((d for d in plan.get("days", []) if d.get("day_number") == data.day_number), None)
        if day is None:
            raise NotFoundError("Day not found")
        meal = next((m for m in day.get("meals", []) if m.get("meal_type") == data.meal_type.value), None)
        if meal is None:
            raise NotFoundError("Meal not found")

        updates = data.updates
        if updates.completed is not None:
            meal["completed"] = updates.completed
            meal["completed_at"] = datetime.utcnow() if updates.completed else None
        if updates.notes is not None:
            meal["notes"] = updates.notes
        if updates.recipe_id is not None:
            meal["recipe_id"] = to_object_id(updates.recipe_id)

        plan = repo.update_owned(plan_id, user["_id"], {"days": plan["days"]})
        return MealPlanService._populate(db, user, plan)

    @staticmethod
    def delete_plan(db: Database, user: Dict[str, Any], plan_id: str) -> None:
        if not MealPlanRepository(db).delete_owned(plan_id, user["_id"]):
            raise NotFoundError("Meal plan not found")
