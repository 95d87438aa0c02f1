"""Meal plan routes"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from pymongo.database import Database
import logging

from api.dependencies import get_current_user, get_db
from domain.mappers import DocumentMapper
from domain.schemas.meal_plan_schemas import MealPlanCreate, MealPlanMealUpdate, MealPlanUpdate
from services.meal_plan_service import MealPlanService

router = APIRouter(prefix="/meal-plans", tags=["Meal Plans"])
logger = logging.getLogger("lifetrack.api.meal_plans")


@router.get("")
def list_meal_plans(
    active: Optional[bool] = Query(None),
    populate: bool = Query(False, description="Embed the recipe of every meal"),
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """The user's meal plans, latest start date first"""
    plans = MealPlanService.list_plans(db, user, active, populate)
    return {"success": True, "meal_plans": [DocumentMapper.to_response(p) for p in plans]}


@router.get("/{plan_id}")
def get_meal_plan(
    plan_id: str,
    populate: bool = Query(False),
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    plan = MealPlanService.get_plan(db, user, plan_id, populate)
    return {"success": True, "meal_plan": DocumentMapper.to_response(plan)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_meal_plan(
    payload: MealPlanCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """
    Create a meal plan. With ``generate_with_ai`` every day gets breakfast,
    lunch, dinner and dessert recipes, which are also saved to the user's recipes.
    """
    plan = MealPlanService.create_plan(db, user, payload)
    return {"success": True, "meal_plan": DocumentMapper.to_response(plan)}


@router.put("/{plan_id}")
def update_meal_plan(
    plan_id: str,
    payload: MealPlanUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    plan = MealPlanService.update_plan(db, user, plan_id, payload)
    return {"success": True, "meal_plan": DocumentMapper.to_response(plan)}


@router.patch("/{plan_id}/meals")
def update_meal(
    plan_id: str,
    payload: MealPlanMealUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Complete, annotate or swap the recipe of one meal"""
    plan = MealPlanService.update_meal(db, user, plan_id, payload)
    return {"success": True, "meal_plan": DocumentMapper.to_response(plan)}


@router.delete("/{plan_id}")
def delete_meal_plan(
    plan_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    MealPlanService.delete_plan(db, user, plan_id)
    return {"success": True, "message": "Meal plan deleted successfully"}
