"""Shopping list routes"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from pymongo.database import Database
import logging

from api.dependencies import get_current_user, get_db
from app.exceptions import ServiceValidationError
from domain.mappers import DocumentMapper
from domain.schemas.shopping_schemas import ShoppingBulkCreate, ShoppingItemUpdate
from services.shopping_service import ShoppingService

router = APIRouter(prefix="/shopping", tags=["Shopping"])
logger = logging.getLogger("lifetrack.api.shopping")


@router.get("")
def list_items(
    purchased: Optional[bool] = Query(None),
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Shopping list items, newest first"""
    items = ShoppingService.list_items(db, user, purchased)
    return {"items": [DocumentMapper.to_response(i) for i in items]}


@router.post("", status_code=status.HTTP_201_CREATED)
def add_items(
    payload: ShoppingBulkCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Add several items to the shopping list"""
    items = ShoppingService.add_items(db, user, payload)
    return {"items": [DocumentMapper.to_response(i) for i in items]}


@router.delete("")
def clear_purchased(
    purchased: Optional[bool] = Query(None),
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Remove every purchased item. Only ``purchased=true`` is supported."""
    if purchased is not True:
        raise ServiceValidationError("Only purchased items can be cleared; use purchased=true")
    deleted = ShoppingService.clear_purchased(db, user)
    return {"message": "Purchased items cleared", "deleted_count": deleted}


@router.put("/items/{item_id}")
def update_item(
    item_id: str,
    payload: ShoppingItemUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return DocumentMapper.to_response(ShoppingService.update_item(db, user, item_id, payload))


@router.delete("/items/{item_id}")
def delete_item(
    item_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    ShoppingService.delete_item(db, user, item_id)
    return {"message": "Item deleted successfully"}
