"""
Nutrition arithmetic shared by meal logging, summaries and recipes.

Calories are whole numbers (``round(per_100g * quantity / 100)``), macros
keep one decimal place. Halves round up, as the web client does.
"""

import math
from typing import Dict, Optional

from domain.enums import ActivityLevel, Gender

ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def round1(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


def calculate_calories(quantity_grams: float, calories_per_100g: float) -> int:
    return round_half_up(calories_per_100g * quantity_grams / 100)


def calculate_macros(
    quantity_grams: float, protein: float = 0, carbs: float = 0, fat: float = 0
) -> Dict[str, float]:
    factor = quantity_grams / 100
    return {
        "protein": round1(protein * factor),
        "carbs": round1(carbs * factor),
        "fat": round1(fat * factor),
    }


def calculate_bmr(weight_kg: float, height_cm: float, age: int, gender: Optional[str]) -> int:
    """Mifflin-St Jeor basal metabolic rate."""
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    offset = 5 if gender == Gender.MALE.value else -161
    return round_half_up(base + offset)


def calculate_tdee(bmr: float, activity_level: str) -> int:
    multiplier = ACTIVITY_MULTIPLIERS[ActivityLevel(activity_level)]
    return round_half_up(bmr * multiplier)


def calculate_daily_balance(consumed: float, burned: float, goal: float) -> Dict[str, float]:
    net = consumed - burned
    return {
        "net_calories": net,
        "remaining_calories": goal - net,
        "over_goal": net > goal,
    }
