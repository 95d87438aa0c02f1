"""Shopping list service"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo.database import Database

from app.exceptions import NotFoundError
from domain.schemas.shopping_schemas import ShoppingBulkCreate, ShoppingItemUpdate
from repositories import ShoppingItemRepository

logger = logging.getLogger("lifetrack.services.shopping")


class ShoppingService:
    """Business logic for the user's shopping list."""

    @staticmethod
    def list_items(db: Database, user: Dict[str, Any], purchased: Optional[bool] = None) -> List[Dict[str, Any]]:
        return ShoppingItemRepository(db).list_for_user(user["_id"], purchased)

    @staticmethod
    def add_items(db: Database, user: Dict[str, Any], data: ShoppingBulkCreate) -> List[Dict[str, Any]]:
        """
        Insert several items at once.

        All items share one ``added_at`` timestamp; the list is returned in
        request order.
        """
        now = datetime.utcnow()
        documents = []
        for item in data.items:
            document = item.model_dump()
            document["user_id"] = user["_id"]
            document["added_at"] = now
            documents.append(document)
        items = ShoppingItemRepository(db).create_many(documents)
        logger.info("Added %d shopping items for user %s", len(items), user["_id"])
        return items

    @staticmethod
    def update_item(db: Database, user: Dict[str, Any], item_id: str, data: ShoppingItemUpdate) -> Dict[str, Any]:
        fields = data.model_dump(exclude_unset=True, exclude_none=True)
        repo = ShoppingItemRepository(db)
        item = repo.update_owned(item_id, user["_id"], fields) if fields else repo.get_owned(item_id, user["_id"])
        if not item:
            raise NotFoundError("Item not found")
        return item

    @staticmethod
    def delete_item(db: Database, user: Dict[str, Any], item_id: str) -> None:
        if not ShoppingItemRepository(db).delete_owned(item_id, user["_id"]):
            raise NotFoundError("Item not found")

    @staticmethod
    def clear_purchased(db: Database, user: Dict[str, Any]) -> int:
        deleted = ShoppingItemRepository(db).delete_purchased(user["_id"])
        logger.info("Cleared %d purchased items for user %s", deleted, user["_id"])
        return deleted
