from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
import datetime

from domain.enums import MealType


class NutritionPer100g(BaseModel):
    calories: float = Field(..., ge=0)
    protein: float = Field(0, ge=0)
    carbs: float = Field(0, ge=0)
    fat: float = Field(0, ge=0)


class MealEntryCreate(BaseModel):
    """
    A logged meal. Either give ``calories`` directly or give
    ``quantity_grams`` together with ``per_100g`` values and let the
    service compute calories and macros.
    """

    name: str = Field(..., min_length=1, max_length=200)
    meal_type: MealType
    date: Optional[datetime.date] = None
    quantity_grams: Optional[float] = Field(None, ge=0)
    calories: Optional[float] = Field(None, ge=0)
    protein: float = Field(0, ge=0)
    carbs: float = Field(0, ge=0)
    fat: float = Field(0, ge=0)
    per_100g: Optional[NutritionPer100g] = None

    @field_validator("name")
    def strip_name(cls, v):
        return v.strip()

    @model_validator(mode="after")
    def require_calorie_source(self):
        if self.calories is None and (self.per_100g is None or self.quantity_grams is None):
            raise ValueError("calories is required unless quantity_grams and per_100g are given")
        return self


class NutritionCalculationRequest(BaseModel):
    quantity_grams: float = Field(..., ge=0)
    per_100g: NutritionPer100g


class WorkoutEntryExercise(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    duration_minutes: Optional[float] = Field(None, ge=0)
    sets: Optional[int] = Field(None, ge=0)
    reps: Optional[int] = Field(None, ge=0)
    weight: Optional[float] = Field(None, ge=0)
    calories_burned: float = Field(0, ge=0)


class WorkoutEntryCreate(BaseModel):
    date: Optional[datetime.date] = None
    exercises: List[WorkoutEntryExercise] = Field(..., min_length=1)
    notes: Optional[str] = Field(None, max_length=1000)
