"""
Base repository interface for data access layer.
This follows the Repository pattern to separate business logic from data access.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple
from abc import ABC
from datetime import datetime

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database

Document = Dict[str, Any]
SortSpec = Sequence[Tuple[str, int]]


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse an id coming from a URL or body; invalid ids map to None."""
    if isinstance(value, ObjectId):
        return value
    if value is None or not ObjectId.is_valid(str(value)):
        return None
    return ObjectId(str(value))


class BaseRepository(ABC):
    """
    Base repository providing common CRUD operations on one collection.
    All repositories should inherit from this class and set ``collection_name``.
    """

    collection_name: str = ""

    def __init__(self, db: Database):
        self.db = db
        self.collection: Collection = db[self.collection_name]

    def get_by_id(self, entity_id: Any) -> Optional[Document]:
        """
        Get document by ID.

        Args:
            entity_id: ObjectId or its string form

        Returns:
            Document or None if not found / id malformed
        """
        oid = to_object_id(entity_id)
        if oid is None:
            return None
        return self.collection.find_one({"_id": oid})

    def find(
        self,
        query: Optional[Document] = None,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[Document]:
        cursor = self.collection.find(query or {})
        if sort:
            cursor = cursor.sort(list(sort))
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)

    def count(self, query: Optional[Document] = None) -> int:
        return self.collection.count_documents(query or {})

    def create(self, document: Document) -> Document:
        """Insert a document, stamping created_at/updated_at when absent."""
        now = datetime.utcnow()
        document.setdefault("created_at", now)
        document.setdefault("updated_at", now)
        result = self.collection.insert_one(document)
        document["_id"] = result.inserted_id
        return document

    def create_many(self, documents: List[Document]) -> List[Document]:
        if not documents:
            return []
        now = datetime.utcnow()
        for doc in documents:
            doc.setdefault("created_at", now)
            doc.setdefault("updated_at", now)
        result = self.collection.insert_many(documents)
        for doc, inserted_id in zip(documents, result.inserted_ids):
            doc["_id"] = inserted_id
        return documents

    def update_by_id(self, entity_id: Any, fields: Document) -> Optional[Document]:
        """Set the given fields and return the updated document."""
        oid = to_object_id(entity_id)
        if oid is None:
            return None
        return self._update_one({"_id": oid}, fields)

    def delete_by_id(self, entity_id: Any) -> bool:
        oid = to_object_id(entity_id)
        if oid is None:
            return False
        return self.collection.delete_one({"_id": oid}).deleted_count > 0

    def exists(self, entity_id: Any) -> bool:
        """Check if document exists"""
        return self.get_by_id(entity_id) is not None

    def _update_one(self, query: Document, fields: Document) -> Optional[Document]:
        fields = dict(fields)
        fields["updated_at"] = datetime.utcnow()
        return self.collection.find_one_and_update(
            query, {"$set": fields}, return_document=ReturnDocument.AFTER
        )


class OwnedRepository(BaseRepository):
    """
    Repository for documents owned by a single user.

    Every accessor filters by ``user_id`` so a record of another user is
    indistinguishable from a missing one.
    """

    def _owned_query(self, entity_id: Any, user_id: ObjectId) -> Optional[Document]:
        oid = to_object_id(entity_id)
        if oid is None:
            return None
        return {"_id": oid, "user_id": user_id}

    def get_owned(self, entity_id: Any, user_id: ObjectId) -> Optional[Document]:
        query = self._owned_query(entity_id, user_id)
        if query is None:
            return None
        return self.collection.find_one(query)

    def list_owned(
        self,
        user_id: ObjectId,
        filters: Optional[Document] = None,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[Document]:
        query = dict(filters or {})
        query["user_id"] = user_id
        return self.find(query, sort=sort, skip=skip, limit=limit)

    def count_owned(self, user_id: ObjectId, filters: Optional[Document] = None) -> int:
        query = dict(filters or {})
        query["user_id"] = user_id
        return self.count(query)

    def update_owned(
        self, entity_id: Any, user_id: ObjectId, fields: Document
    ) -> Optional[Document]:
        query = self._owned_query(entity_id, user_id)
        if query is None:
            return None
        return self._update_one(query, fields)

    def delete_owned(self, entity_id: Any, user_id: ObjectId) -> bool:
        query = self._owned_query(entity_id, user_id)
        if query is None:
            return False
        return self.collection.delete_one(query).deleted_count > 0

    def delete_all_for_user(self, user_id: ObjectId) -> int:
        return self.collection.delete_many({"user_id": user_id}).deleted_count
