from calendar import monthrange
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Tuple
import logging

from bson import ObjectId
from pymongo.database import Database

from adapters import openai_adapter
from app.exceptions import NotFoundError, ServiceValidationError
from domain.mappers import DocumentMapper, UserMapper
from domain.schemas.user_schemas import OnboardingRequest, UserPreferences, UserUpdate
from services import nutrition_calculator as calc
from repositories import (
    UserRepository,
    MealRepository,
    WorkoutEntryRepository,
    RecipeRepository,
    ExpenseRepository,
    IncomeRepository,
    ExerciseRepository,
    WorkoutPlanRepository,
    WorkoutSessionRepository,
    ShoppingItemRepository,
    MealPlanRepository,
    NotificationRepository,
    UpdateRepository,
    ChatRepository,
    BugReportRepository,
)

logger = logging.getLogger("lifetrack.services.user")

OWNED_REPOSITORIES = (
    MealRepository,
    WorkoutEntryRepository,
    RecipeRepository,
    ExpenseRepository,
    IncomeRepository,
    ExerciseRepository,
    WorkoutPlanRepository,
    WorkoutSessionRepository,
    ShoppingItemRepository,
    MealPlanRepository,
    NotificationRepository,
    UpdateRepository,
    BugReportRepository,
)

GOAL_SYSTEM_PROMPT = """
You are a professional fitness and nutrition planner.
Create a realistic, personalized calorie plan and progress roadmap for the user.

Calculate:
1. Maintenance calories (roughly 31 x bodyweight in kg for average activity).
2. Target calories: lose weight 15-25% deficit, gain weight 10-20% surplus, maintain = maintenance.
3. For each period, separately: calories to consume and calories to burn through exercise (200-600 kcal/day).
4. Progress milestones with the same periods.
5. Short realistic, educational and motivational notes.

Use weekly periods ("Week 1", "Week 2", ...) for plans up to 3 months, otherwise monthly
periods ("Month 1", ...), at most 13 periods. When questionnaire answers are given, adapt
the plan to activity level, habits, sleep, stress and health conditions.

Respond with JSON only:
{
  "plan": {
    "maintenance_calories": number,
    "goal_calories_start": number,
    "goal_calories_end": number,
    "average_daily_deficit_or_surplus_kcal": number,
    "expected_total_weight_change_kg": number,
    "target_weight_kg": number,
    "calorie_schedule": [{"period": string, "calories_to_consume": number,
        "calories_to_burn": number, "net_calories": number,
        "average_weekly_weight_change_kg": number}],
    "progress_milestones": [{"period": string, "target_weight_kg": number}],
    "notes": [string]
  }
}
"""


def _add_months(day: date, months: int) -> date:
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(day.day, monthrange(year, month)[1]))


def calculate_period_dates(period: str, start: date, index: int) -> Tuple[date, date]:
    """
    Start and end date of the ``index``-th period of a goal plan.

    Weekly periods span 7 days; other periods span one calendar month
    (inclusive end date).
    """
    if "week" in (period or "").lower():
        period_start = start + timedelta(days=7 * index)
        return period_start, period_start + timedelta(days=6)
    period_start = _add_months(start, index)
    return period_start, _add_months(start, index + 1) - timedelta(days=1)


class UserService:
    @staticmethod
    def update_profile(db: Database, user: Dict[str, Any], data: UserUpdate) -> Dict[str, Any]:
        """Write only the fields present in the request."""
        fields = DocumentMapper.to_storage(data.model_dump(exclude_unset=True, exclude_none=True))
        if not fields:
            return user
        updated = UserRepository(db).update_by_id(user["_id"], fields)
        logger.info("Updated profile fields %s for user %s", sorted(fields), user["_id"])
        return updated

    @staticmethod
    def update_preferences(db: Database, user: Dict[str, Any], preferences: UserPreferences) -> Dict[str, Any]:
        return UserRepository(db).update_by_id(user["_id"], {"preferences": preferences.model_dump()})

    @staticmethod
    def save_onboarding(db: Database, user: Dict[str, Any], data: OnboardingRequest) -> Dict[str, Any]:
        if data.preferences is None and not data.answers:
            raise ServiceValidationError("Either preferences or answers are required")
        fields: Dict[str, Any] = {"onboarding_answers": [a.model_dump() for a in data.answers]}
        if data.preferences is not None:
            fields["preferences"] = data.preferences.model_dump()
        return UserRepository(db).update_by_id(user["_id"], fields)

    @staticmethod
    def delete_account(db: Database, user_id: ObjectId) -> Dict[str, int]:
        """
        Delete a user and everything they own.

        Returns:
            Mapping of collection name to number of deleted documents
        """
        deleted: Dict[str, int] = {}
        for repo_cls in OWNED_REPOSITORIES:
            repo = repo_cls(db)
            deleted[repo.collection_name] = repo.delete_all_for_user(user_id)
        deleted["chats"] = ChatRepository(db).delete_for_participant(user_id)
        if not UserRepository(db).delete_by_id(user_id):
            raise NotFoundError("User not found")
        logger.info("Deleted user %s and owned data %s", user_id, deleted)
        return deleted

    @staticmethod
    def generate_goal(db: Database, user: Dict[str, Any]) -> Dict[str, Any]:
        """
        Ask the language model for a personalized calorie plan and store it as the user's goal.

        Raises:
            ServiceValidationError: if the profile has no weight
            ServiceUnavailableError / UpstreamTimeoutError / UpstreamServiceError: AI failures
        """
        weight = (user.get("weight") or {}).get("value")
        if not weight:
            raise ServiceValidationError("User weight is required. Please update your profile first.")
        weight_kg = weight * 0.453592 if (user.get("weight") or {}).get("unit") == "lbs" else weight

        context_lines = [f"- {qa.get('question')}: {qa.get('answer')}" for qa in user.get("onboarding_answers") or []]
        context = "\n".join(context_lines) if context_lines else "No questionnaire answers."
        result = openai_adapter.chat_json(
            GOAL_SYSTEM_PROMPT,
            f"Current weight: {round(weight_kg, 1)} kg\nQuestionnaire answers:\n{context}",
            temperature=0.7,
            max_tokens=4000,
            timeout=120,
        )
        plan = result.get("plan") or result

        created_at = datetime.utcnow()
        start = created_at.date()
        goal = {
            "plan": {
                "maintenance_calories": plan.get("maintenance_calories"),
                "goal_calories_start": plan.get("goal_calories_start"),
                "goal_calories_end": plan.get("goal_calories_end"),
                "average_daily_deficit_or_surplus_kcal": plan.get("average_daily_deficit_or_surplus_kcal"),
                "expected_total_weight_change_kg": plan.get("expected_total_weight_change_kg"),
                "target_weight_kg": plan.get("target_weight_kg"),
                "calorie_schedule": UserService._schedule(plan.get("calorie_schedule"), start, (
                    "calories_to_consume", "calories_to_burn", "net_calories", "average_weekly_weight_change_kg",
                )),
                "progress_milestones": UserService._schedule(plan.get("progress_milestones"), start, (
                    "target_weight_kg",
                )),
                "notes": [str(n) for n in plan.get("notes") or []],
            },
            "created_at": created_at,
        }
        UserRepository(db).update_by_id(user["_id"], {"goal": goal})
        logger.info("Stored AI goal plan for user %s", user["_id"])
        return goal

    @staticmethod
    def _schedule(items: Any, start: date, keys: Tuple[str, ...]) -> List[Dict[str, Any]]:
        schedule = []
        for index, item in enumerate(items if isinstance(items, list) else []):
            if not isinstance(item, dict):
                continue
            period = str(item.get("period") or f"Period {index + 1}")
            period_start, period_end = calculate_period_dates(period, start, index)
            entry = {"period": period, "start_date": period_start.isoformat(), "end_date": period_end.isoformat()}
            entry.update({k: item.get(k) for k in keys})
            schedule.append(entry)
        return schedule

    @staticmethod
    def get_goal(user: Dict[str, Any]) -> Dict[str, Any]:
        goal = user.get("goal")
        if not goal or not goal.get("plan"):
            raise NotFoundError("No goal set yet. Please create a goal first.")
        return goal

    @staticmethod
    def energy_needs(user: Dict[str, Any], activity_level: str = "moderate") -> Dict[str, Any]:
        """
        BMR and TDEE from the stored profile.

        Raises:
            ServiceValidationError: if weight, height or birthday is missing
        """
        weight = user.get("weight") or {}
        height = user.get("height") or {}
        age = UserMapper.age(user)
        if not weight.get("value") or not height.get("value") or age is None:
            raise ServiceValidationError("Weight, height and birthday are required. Please update your profile first.")

        weight_kg = weight["value"] * 0.453592 if weight.get("unit") == "lbs" else weight["value"]
        height_cm = height["value"] * 30.48 if height.get("unit") == "ft" else height["value"]
        bmr = calc.calculate_bmr(weight_kg, height_cm, age, user.get("gender"))
        return {
            "bmr": bmr,
            "tdee": calc.calculate_tdee(bmr, activity_level),
            "activity_level": activity_level,
            "age": age,
            "weight_kg": calc.round1(weight_kg),
            "height_cm": calc.round1(height_cm),
        }
