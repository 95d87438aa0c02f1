from pydantic import BaseModel, Field
from typing import List, Optional
import datetime

from domain.enums import MealPlanType, PlanMealType


class MealPlanPreferences(BaseModel):
    dislikes: List[str] = Field(default_factory=list)
    excluded_ingredients: List[str] = Field(default_factory=list)
    allergies: List[str] = Field(default_factory=list)
    dietary_restrictions: List[str] = Field(default_factory=list)
    calorie_target: Optional[int] = Field(None, ge=500, le=10000)
    protein_target: Optional[int] = Field(None, ge=0, le=1000)


class MealPlanMeal(BaseModel):
    recipe_id: Optional[str] = None
    recipe_title: Optional[str] = None
    meal_type: PlanMealType
    completed: bool = False
    completed_at: Optional[datetime.datetime] = None
    notes: str = ""


class MealPlanDay(BaseModel):
    day_number: int = Field(..., ge=1)
    date: datetime.date
    meals: List[MealPlanMeal] = Field(default_factory=list)


class MealPlanCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    type: MealPlanType = MealPlanType.WEEKLY
    start_date: datetime.date
    preferences: MealPlanPreferences = Field(default_factory=MealPlanPreferences)
    generate_with_ai: bool = True


class MealPlanUpdate(BaseModel):
    """Only these fields of a stored plan may be changed."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    days: Optional[List[MealPlanDay]] = None
    preferences: Optional[MealPlanPreferences] = None
    is_active: Optional[bool] = None


class MealUpdates(BaseModel):
    completed: Optional[bool] = None
    notes: Optional[str] = Field(None, max_length=1000)
    recipe_id: Optional[str] = None


class MealPlanMealUpdate(BaseModel):
    day_number: int = Field(..., ge=1)
    meal_type: PlanMealType
    updates: MealUpdates
