"""
User Repository - Data access layer for user accounts
"""

import re
from datetime import datetime
from typing import Any, List, Optional

from bson import ObjectId

from repositories.base import BaseRepository, Document, to_object_id


class UserRepository(BaseRepository):
    """Repository for user documents"""

    collection_name = "users"

    def get_by_email(self, email: str) -> Optional[Document]:
        """Get user by email (emails are stored lowercase)"""
        return self.collection.find_one({"email": email.lower().strip()})

    def email_exists(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def list_all(self) -> List[Document]:
        return self.find(sort=[("created_at", -1)])

    def get_many(self, user_ids: List[Any]) -> List[Document]:
        """Fetch users by id; malformed ids are ignored."""
        oids = [oid for oid in (to_object_id(u) for u in user_ids) if oid is not None]
        if not oids:
            return []
        return self.find({"_id": {"$in": oids}})

    def list_ids(self) -> List[ObjectId]:
        return [doc["_id"] for doc in self.collection.find({}, {"_id": 1})]

    def count_created_since(self, since: datetime) -> int:
        return self.count({"created_at": {"$gte": since}})

    def search(self, term: str, exclude_id: ObjectId, limit: int = 10) -> List[Document]:
        """Case-insensitive match on email or name, excluding one user."""
        pattern = re.escape(term.strip())
        return self.find(
            {
                "_id": {"$ne": exclude_id},
                "$or": [
                    {"email": {"$regex": pattern, "$options": "i"}},
                    {"first_name": {"$regex": pattern, "$options": "i"}},
                    {"last_name": {"$regex": pattern, "$options": "i"}},
                ],
            },
            limit=limit,
        )
