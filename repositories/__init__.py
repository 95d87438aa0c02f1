"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository, OwnedRepository, to_object_id
from repositories.user_repository import UserRepository
from repositories.meal_repository import MealRepository, WorkoutEntryRepository
from repositories.recipe_repository import RecipeRepository
from repositories.finance_repository import ExpenseRepository, IncomeRepository
from repositories.workout_repository import (
    ExerciseRepository,
    WorkoutPlanRepository,
    WorkoutSessionRepository,
)
from repositories.shopping_repository import ShoppingItemRepository
from repositories.notification_repository import (
    NotificationRepository,
    UpdateRepository,
    ChatRepository,
    BugReportRepository,
)
from repositories.meal_plan_repository import MealPlanRepository

__all__ = [
    "BaseRepository",
    "OwnedRepository",
    "to_object_id",
    "UserRepository",
    "MealRepository",
    "WorkoutEntryRepository",
    "RecipeRepository",
    "ExpenseRepository",
    "IncomeRepository",
    "ExerciseRepository",
    "WorkoutPlanRepository",
    "WorkoutSessionRepository",
    "ShoppingItemRepository",
    "NotificationRepository",
    "UpdateRepository",
    "ChatRepository",
    "BugReportRepository",
    "MealPlanRepository",
]
