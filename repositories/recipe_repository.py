"""
Recipe Repository - Data access layer for user recipes (MongoDB)
"""

import re
from typing import Any, List, Optional

from bson import ObjectId

from repositories.base import OwnedRepository, Document, to_object_id


class RecipeRepository(OwnedRepository):
    """Repository for recipe documents"""

    collection_name = "recipes"

    def search(
        self,
        user_id: ObjectId,
        query: Optional[str] = None,
        tags: Optional[List[str]] = None,
        limit: int = 20,
    ) -> List[Document]:
        """Search the user's recipes

        Args:
            user_id: owner
            query: case-insensitive title match
            tags: lowercase tags to match (any)
            limit: maximum number of results

        Returns:
            Recipes, newest first
        """
        filters: Document = {}
        if query:
            filters["title"] = {"$regex": re.escape(query.strip()), "$options": "i"}
        if tags:
            filters["tags"] = {"$in": tags}
        return self.list_owned(user_id, filters, sort=[("created_at", -1)], limit=limit)

    def get_many_owned(self, recipe_ids: List[Any], user_id: ObjectId) -> List[Document]:
        oids = [oid for oid in (to_object_id(r) for r in recipe_ids) if oid is not None]
        if not oids:
            return []
        return self.list_owned(user_id, {"_id": {"$in": oids}})
