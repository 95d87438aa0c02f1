"""API routes package"""

from . import (
    health,
    auth,
    users,
    meals,
    recipes,
    nutrition,
    finance,
    workouts,
    shopping,
    notifications,
    admin,
    meal_plans,
    fitness_chat,
)

__all__ = [
    "health",
    "auth",
    "users",
    "meals",
    "recipes",
    "nutrition",
    "finance",
    "workouts",
    "shopping",
    "notifications",
    "admin",
    "meal_plans",
    "fitness_chat",
]
