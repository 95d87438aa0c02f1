"""
Shopping list repository
"""

from typing import List, Optional

from bson import ObjectId

from repositories.base import OwnedRepository, Document


class ShoppingItemRepository(OwnedRepository):
    """Repository for shopping list items"""

    collection_name = "shopping_items"

    def list_for_user(self, user_id: ObjectId, purchased: Optional[bool] = None) -> List[Document]:
        filters = {} if purchased is None else {"purchased": purchased}
        return self.list_owned(user_id, filters, sort=[("added_at", -1)])

    def delete_purchased(self, user_id: ObjectId) -> int:
        return self.collection.delete_many({"user_id": user_id, "purchased": True}).deleted_count
