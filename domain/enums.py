"""
Domain enums for LifeTrack.
Contains all enumeration types used across the domain schemas.
"""

import enum


class Language(str, enum.Enum):
    """Supported interface languages"""

    EN = "en"
    DE = "de"
    FR = "fr"
    NL = "nl"
    HU = "hu"
    ES = "es"
    PT = "pt"


class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    PREFER_NOT_TO_SAY = "prefer-not-to-say"


class WeightUnit(str, enum.Enum):
    KG = "kg"
    LBS = "lbs"


class HeightUnit(str, enum.Enum):
    CM = "cm"
    FT = "ft"


class ActivityLevel(str, enum.Enum):
    """Physical activity levels used for TDEE multipliers"""

    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    VERY_ACTIVE = "very_active"


class MealType(str, enum.Enum):
    """Slot of a logged meal entry"""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"
    DRINK = "drink"


class PlanMealType(str, enum.Enum):
    """Slot of a meal inside a meal plan day"""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    DESSERT = "dessert"
    SNACK = "snack"


class MealPlanType(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"


class FinancePeriod(str, enum.Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class ExerciseCategory(str, enum.Enum):
    STRENGTH = "strength"
    CARDIO = "cardio"
    FLEXIBILITY = "flexibility"
    SPORTS = "sports"
    OTHER = "other"


class MuscleGroup(str, enum.Enum):
    CHEST = "chest"
    BACK = "back"
    SHOULDERS = "shoulders"
    ARMS = "arms"
    LEGS = "legs"
    CORE = "core"
    FULL_BODY = "full_body"
    CARDIO = "cardio"


class Difficulty(str, enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class NotificationType(str, enum.Enum):
    INFO = "info"
    WARNING = "warning"
    SUCCESS = "success"
    ERROR = "error"


class UpdateType(str, enum.Enum):
    FEATURE = "feature"
    BUGFIX = "bugfix"
    MAINTENANCE = "maintenance"
    ANNOUNCEMENT = "announcement"


class UpdatePriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ChatCategory(str, enum.Enum):
    """Intent categories recognised by the fitness assistant"""

    TRAINING = "training"
    NUTRITION = "nutrition"
    RECOVERY = "recovery"
    GENERAL = "general"


class ChatStage(str, enum.Enum):
    """Markers carried on assistant messages of the training flow"""

    ASK_MUSCLE_GROUPS = "ask_muscle_groups"
    ASK_EXERCISE_COUNT = "ask_exercise_count"
    WORKOUT_READY = "workout_ready"
    ANSWER = "answer"
