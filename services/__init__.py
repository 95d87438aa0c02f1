"""Services package - Business logic layer"""

from services.auth_service import AuthService
from services.user_service import UserService
from services.meal_service import MealService, DailySummaryService
from services.recipe_service import RecipeService
from services.nutrition_service import NutritionService
from services.finance_service import ExpenseService, IncomeService, FinanceService
from services.workout_service import (
    WorkoutEntryService,
    ExerciseService,
    WorkoutPlanService,
    WorkoutSessionService,
)
from services.shopping_service import ShoppingService
from services.notification_service import (
    NotificationService,
    UpdateService,
    ChatService,
    BugReportService,
)
from services.admin_service import AdminService
from services.meal_plan_service import MealPlanService
from services.fitness_chat_service import FitnessChatService

# Note: nutrition_calculator and dates contain utility functions, not classes

__all__ = [
    "AuthService",
    "UserService",
    "MealService",
    "DailySummaryService",
    "RecipeService",
    "NutritionService",
    "ExpenseService",
    "IncomeService",
    "FinanceService",
    "WorkoutEntryService",
    "ExerciseService",
    "WorkoutPlanService",
    "WorkoutSessionService",
    "ShoppingService",
    "NotificationService",
    "UpdateService",
    "ChatService",
    "BugReportService",
    "AdminService",
    "MealPlanService",
    "FitnessChatService",
]
