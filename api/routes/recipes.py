"""Recipe routes: the user's recipe book, AI generation and external search"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from pymongo.database import Database
import logging

from api.dependencies import get_current_user, get_db
from domain.mappers import DocumentMapper
from domain.schemas.recipe_schemas import RecipeCreate, RecipeGenerateRequest, RecipeUpdate
from services.recipe_service import RecipeService

router = APIRouter(prefix="/recipes", tags=["Recipes"])
logger = logging.getLogger("lifetrack.api.recipes")


@router.get("")
def list_recipes(
    search: Optional[str] = Query(None, description="Case-insensitive title search"),
    tags: Optional[str] = Query(None, description="Comma separated tags"),
    meal_type: Optional[str] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Search the user's recipes, newest first"""
    recipes = RecipeService.list_recipes(db, user, search, tags, meal_type, limit)
    return {"recipes": [DocumentMapper.to_response(r) for r in recipes]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_recipe(
    payload: RecipeCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    recipe = RecipeService.create_recipe(db, user, payload)
    return DocumentMapper.to_response(recipe)


@router.post("/generate")
def generate_recipes(payload: RecipeGenerateRequest, user: Dict[str, Any] = Depends(get_current_user)):
    """Generate up to 5 recipes using all given ingredients. Nothing is saved."""
    return RecipeService.generate_recipes(user, payload)


@router.get("/external-search")
def external_search(
    q: str = Query(..., min_length=1),
    meal_type: Optional[str] = Query(None),
    cuisine_type: Optional[str] = Query(None),
    diet: Optional[str] = Query(None),
    health: Optional[str] = Query(None),
    user: Dict[str, Any] = Depends(get_current_user),
):
    """Search the external recipe database"""
    return RecipeService.search_external(q, meal_type, cuisine_type, diet, health)


@router.get("/{recipe_id}")
def get_recipe(
    recipe_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return DocumentMapper.to_response(RecipeService.get_recipe(db, user, recipe_id))


@router.put("/{recipe_id}")
def update_recipe(
    recipe_id: str,
    payload: RecipeUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    recipe = RecipeService.update_recipe(db, user, recipe_id, payload)
    return DocumentMapper.to_response(recipe)


@router.delete("/{recipe_id}")
def delete_recipe(
    recipe_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    RecipeService.delete_recipe(db, user, recipe_id)
    return {"message": "Recipe deleted successfully"}
