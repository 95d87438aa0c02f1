"""Meal log, nutrition calculation and daily summary routes"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from pymongo.database import Database
import logging

from api.dependencies import get_current_user, get_db
from domain.mappers import DocumentMapper
from domain.schemas.meal_schemas import MealEntryCreate, NutritionCalculationRequest
from services.meal_service import DailySummaryService, MealService

router = APIRouter(tags=["Meals"])
logger = logging.getLogger("lifetrack.api.meals")


@router.get("/meals")
def list_meals(
    date: Optional[str] = Query(None, description="Day as YYYY-MM-DD"),
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Meals logged on one day, oldest first"""
    meals = MealService.list_for_date(db, user, date)
    return {"meals": [DocumentMapper.to_response(m) for m in meals]}


@router.post("/meals", status_code=status.HTTP_201_CREATED)
def create_meal(
    payload: MealEntryCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Log a meal; calories are computed from per-100g values when given"""
    meal = MealService.create(db, user, payload)
    return DocumentMapper.to_response(meal)


@router.delete("/meals/{meal_id}")
def delete_meal(
    meal_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    MealService.delete(db, user, meal_id)
    return {"message": "Meal deleted successfully"}


@router.post("/meals/calculate")
def calculate_nutrition(payload: NutritionCalculationRequest, user: Dict[str, Any] = Depends(get_current_user)):
    """Calories and macros for a portion"""
    return MealService.calculate(payload.quantity_grams, payload.per_100g)


@router.get("/summary")
def daily_summary(
    date: Optional[str] = Query(None, description="Day as YYYY-MM-DD"),
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Consumed and burned calories against the daily goal"""
    return DailySummaryService.get_summary(db, user, date)
