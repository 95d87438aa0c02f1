"""Current user profile, preferences, onboarding and goal routes"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query
from pymongo.database import Database
import logging

from api.dependencies import get_current_user, get_db
from app.exceptions import ServiceValidationError
from domain.enums import ActivityLevel
from domain.mappers import DocumentMapper, UserMapper
from domain.schemas.user_schemas import OnboardingRequest, UserPreferences, UserUpdate
from services.user_service import UserService

router = APIRouter(prefix="/user", tags=["User"])
logger = logging.getLogger("lifetrack.api.user")


@router.get("")
def get_profile(user: Dict[str, Any] = Depends(get_current_user)):
    """Get the authenticated user's profile"""
    return UserMapper.to_response(user)


@router.put("")
def update_profile(
    payload: UserUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Update profile fields; only provided fields change"""
    updated = UserService.update_profile(db, user, payload)
    return UserMapper.to_response(updated)


@router.delete("")
def delete_account(
    confirm: bool = Query(False),
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Delete the account and all data owned by it. Requires ``confirm=true``."""
    if not confirm:
        raise ServiceValidationError("Account deletion must be confirmed with confirm=true")
    deleted = UserService.delete_account(db, user["_id"])
    logger.info(f"Deleted account {user['_id']}")
    return {"message": "Account deleted successfully", "deleted": deleted}


@router.put("/preferences")
def update_preferences(
    payload: UserPreferences,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Replace the feature preference flags"""
    updated = UserService.update_preferences(db, user, payload)
    return UserMapper.to_response(updated)


@router.post("/onboarding")
def save_onboarding(
    payload: OnboardingRequest,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Store onboarding preferences and answers"""
    updated = UserService.save_onboarding(db, user, payload)
    return UserMapper.to_response(updated)


@router.post("/goal")
def generate_goal(user: Dict[str, Any] = Depends(get_current_user), db: Database = Depends(get_db)):
    """Generate and store a weight goal plan with the AI coach"""
    goal = UserService.generate_goal(db, user)
    return {"message": "Goal created successfully", "goal": DocumentMapper.to_response(goal)}


@router.get("/goal")
def get_goal(user: Dict[str, Any] = Depends(get_current_user)):
    return {"goal": DocumentMapper.to_response(UserService.get_goal(user))}


@router.get("/energy")
def get_energy_needs(
    activity_level: ActivityLevel = Query(ActivityLevel.MODERATE),
    user: Dict[str, Any] = Depends(get_current_user),
):
    """BMR and TDEE from the stored profile"""
    return UserService.energy_needs(user, activity_level.value)
