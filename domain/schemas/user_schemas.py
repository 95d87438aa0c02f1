from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import date

from domain.enums import Language, Gender, WeightUnit, HeightUnit


class BodyWeight(BaseModel):
    value: float = Field(..., ge=1, le=1000)
    unit: WeightUnit = WeightUnit.KG


class BodyHeight(BaseModel):
    value: float = Field(..., ge=1, le=300)
    unit: HeightUnit = HeightUnit.CM


class UserPreferences(BaseModel):
    """Feature opt-ins chosen during onboarding"""

    meal_plans: bool = False
    recipes: bool = False
    trainings: bool = False
    shopping_list: bool = False
    price_monitor: bool = False
    finance: bool = False
    marketing: bool = False
    tips: bool = False
    updates: bool = False


class OnboardingAnswer(BaseModel):
    id: str
    question: str
    answer: str


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    country: str = Field(..., min_length=1, max_length=100)
    language: Language
    birthday: date
    gender: Optional[Gender] = None
    weight: Optional[BodyWeight] = None
    height: Optional[BodyHeight] = None

    @field_validator("first_name", "last_name", "country")
    def strip_text(cls, v):
        return v.strip()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserUpdate(BaseModel):
    """Partial profile update; only provided fields are written."""

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    country: Optional[str] = Field(None, min_length=1, max_length=100)
    language: Optional[Language] = None
    birthday: Optional[date] = None
    gender: Optional[Gender] = None
    weight: Optional[BodyWeight] = None
    height: Optional[BodyHeight] = None
    daily_calorie_goal: Optional[int] = Field(None, ge=500, le=10000)


class OnboardingRequest(BaseModel):
    preferences: Optional[UserPreferences] = None
    answers: List[OnboardingAnswer] = Field(default_factory=list)


class AdminUserUpdate(UserUpdate):
    email: Optional[EmailStr] = None
    preferences: Optional[UserPreferences] = None
