from typing import Any, Dict, List, Optional
import logging

from pymongo.database import Database

from app.exceptions import NotFoundError
from domain.schemas.meal_schemas import MealEntryCreate, NutritionPer100g
from repositories import MealRepository, WorkoutEntryRepository
from services import nutrition_calculator as calc
from services.dates import parse_day, today_str

logger = logging.getLogger("lifetrack.services.meals")

DEFAULT_CALORIE_GOAL = 2000


class MealService:
    @staticmethod
    def list_for_date(db: Database, user: Dict[str, Any], day: Optional[str]) -> List[Dict[str, Any]]:
        """Meals logged on one day, oldest first. ``day`` is required."""
        day = parse_day(day).isoformat()
        return MealRepository(db).list_for_date(user["_id"], day)

    @staticmethod
    def calculate(quantity_grams: float, per_100g: NutritionPer100g) -> Dict[str, float]:
        """Calories and macros for a portion given per-100g values."""
        result: Dict[str, float] = {
            "quantity_grams": quantity_grams,
            "calories": calc.calculate_calories(quantity_grams, per_100g.calories),
        }
        result.update(
            calc.calculate_macros(quantity_grams, per_100g.protein, per_100g.carbs, per_100g.fat)
        )
        return result

    @staticmethod
    def create(db: Database, user: Dict[str, Any], data: MealEntryCreate) -> Dict[str, Any]:
        """
        Log a meal.

        When per-100g values are supplied they win over explicit totals, so
        stored numbers always follow the portion arithmetic.

        Args:
            db: Database handle
            user: Authenticated user document
            data: Validated meal payload

        Returns:
            The stored meal document
        """
        if data.per_100g is not None and data.quantity_grams is not None:
            nutrition = MealService.calculate(data.quantity_grams, data.per_100g)
            calories = nutrition["calories"]
            protein, carbs, fat = nutrition["protein"], nutrition["carbs"], nutrition["fat"]
        else:
            calories = data.calories
            protein, carbs, fat = data.protein, data.carbs, data.fat

        document = {
            "user_id": user["_id"],
            "date": data.date.isoformat() if data.date else today_str(),
            "meal_type": data.meal_type.value,
            "name": data.name,
            "quantity_grams": data.quantity_grams,
            "calories": calories,
            "protein": protein,
            "carbs": carbs,
            "fat": fat,
        }
        meal = MealRepository(db).create(document)
        logger.info("Logged meal %s (%s kcal) for user %s", meal["_id"], calories, user["_id"])
        return meal

    @staticmethod
    def delete(db: Database, user: Dict[str, Any], meal_id: str) -> None:
        if not MealRepository(db).delete_owned(meal_id, user["_id"]):
            raise NotFoundError("Meal not found")


class DailySummaryService:
    @staticmethod
    def get_summary(db: Database, user: Dict[str, Any], day: Optional[str]) -> Dict[str, Any]:
        """
        Totals for one day: calories eaten and burned, macros and the remaining budget.

        The calorie goal is the user's ``daily_calorie_goal`` (2000 when unset).
        """
        day = parse_day(day).isoformat()
        meals = MealRepository(db).list_for_date(user["_id"], day)
        workouts = WorkoutEntryRepository(db).list_for_date(user["_id"], day)

        consumed = sum(m.get("calories") or 0 for m in meals)
        burned = sum(w.get("total_calories") or 0 for w in workouts)
        goal = user.get("daily_calorie_goal") or DEFAULT_CALORIE_GOAL
        balance = calc.calculate_daily_balance(consumed, burned, goal)

        return {
            "date": day,
            "total_calories_consumed": consumed,
            "total_calories_burned": burned,
            "calorie_goal": goal,
            "net_calories": balance["net_calories"],
            "remaining_calories": balance["remaining_calories"],
            "over_goal": balance["over_goal"],
            "total_protein": calc.round1(sum(m.get("protein") or 0 for m in meals)),
            "total_carbs": calc.round1(sum(m.get("carbs") or 0 for m in meals)),
            "total_fat": calc.round1(sum(m.get("fat") or 0 for m in meals)),
            "meals_count": len(meals),
            "workouts_count": len(workouts),
        }