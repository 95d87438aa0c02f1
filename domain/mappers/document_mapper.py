"""
Document mappers.
Handles transformation between pydantic request models, stored MongoDB
documents and JSON-ready response dicts.
"""

import datetime
import enum
from typing import Any, Dict, Optional

from bson import ObjectId
from pydantic import BaseModel


class DocumentMapper:
    """Mapper shared by every collection."""

    @staticmethod
    def to_storage(value: Any) -> Any:
        """
        Convert a value into something pymongo can store.

        Enums become their values and calendar dates become ``YYYY-MM-DD``
        strings (they are compared lexicographically in range queries).
        Datetimes are stored natively.
        """
        if isinstance(value, BaseModel):
            value = value.model_dump()
        if isinstance(value, enum.Enum):
            return value.value
        if isinstance(value, datetime.datetime):
            return value
        if isinstance(value, datetime.date):
            return value.isoformat()
        if isinstance(value, dict):
            return {k: DocumentMapper.to_storage(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [DocumentMapper.to_storage(v) for v in value]
        return value

    @staticmethod
    def to_response(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """
        Convert a stored document to a response dict.

        ``_id`` is exposed as a string ``id`` and every nested ObjectId
        becomes a string.
        """
        if doc is None:
            return None
        result = DocumentMapper._stringify_ids(doc)
        if "_id" in result:
            result["id"] = result.pop("_id")
        return result

    @staticmethod
    def _stringify_ids(value: Any) -> Any:
        if isinstance(value, ObjectId):
            return str(value)
        if isinstance(value, dict):
            return {k: DocumentMapper._stringify_ids(v) for k, v in value.items()}
        if isinstance(value, list):
            return [DocumentMapper._stringify_ids(v) for v in value]
        return value
