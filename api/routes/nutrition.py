"""Nutrition estimation, food analysis, food search and barcode routes"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
import logging

from api.dependencies import get_current_user
from domain.schemas.ai_schemas import FoodImageRequest, FoodTextRequest, NutritionEstimateRequest
from services.nutrition_service import NutritionService

router = APIRouter(tags=["Nutrition"])
logger = logging.getLogger("lifetrack.api.nutrition")


@router.post("/nutrition/estimate")
def estimate_nutrition(payload: NutritionEstimateRequest, user: Dict[str, Any] = Depends(get_current_user)):
    """Estimate per-100g nutrition for a food; uses built-in values when AI is unavailable"""
    return NutritionService.estimate(payload)


@router.post("/food/analyze-text")
def analyze_food_text(payload: FoodTextRequest, user: Dict[str, Any] = Depends(get_current_user)):
    """Break a free-text meal description into foods with calories and macros"""
    return NutritionService.analyze_text(payload.text)


@router.post("/food/analyze-image")
def analyze_food_image(payload: FoodImageRequest, user: Dict[str, Any] = Depends(get_current_user)):
    """Recognise foods on a meal photo"""
    return NutritionService.analyze_image(payload)


@router.get("/food/search")
def search_foods(q: Optional[str] = Query(None), user: Dict[str, Any] = Depends(get_current_user)):
    return NutritionService.search_foods(q)


@router.get("/barcode/product")
def barcode_product(barcode: Optional[str] = Query(None), user: Dict[str, Any] = Depends(get_current_user)):
    """Look up a packaged product by EAN/UPC barcode"""
    return NutritionService.get_barcode_product(barcode)
