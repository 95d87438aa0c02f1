"""
Messaging repositories - notifications, product updates and user-to-user chats
"""

from datetime import datetime
from typing import Any, List, Optional

from bson import ObjectId
from pymongo import ReturnDocument

from repositories.base import BaseRepository, OwnedRepository, Document


class _InboxRepository(OwnedRepository):
    """Per-user inbox items with read state"""

    def list_recent(self, user_id: ObjectId, limit: int = 50) -> List[Document]:
        return self.list_owned(user_id, sort=[("created_at", -1)], limit=limit)

    def count_unread(self, user_id: ObjectId) -> int:
        return self.count_owned(user_id, {"is_read": False})

    def mark_read(self, entity_id: Any, user_id: ObjectId) -> Optional[Document]:
        return self.update_owned(
            entity_id, user_id, {"is_read": True, "read_at": datetime.utcnow()}
        )


class NotificationRepository(_InboxRepository):
    collection_name = "notifications"


class UpdateRepository(_InboxRepository):
    collection_name = "updates"


class ChatRepository(BaseRepository):
    """Two-party chats; access is checked against ``participants``"""

    collection_name = "chats"

    def find_between(self, user_a: ObjectId, user_b: ObjectId) -> Optional[Document]:
        return self.collection.find_one(
            {"participants": {"$all": [user_a, user_b], "$size": 2}}
        )

    def list_for_participant(self, user_id: ObjectId) -> List[Document]:
        return self.find({"participants": user_id}, sort=[("updated_at", -1)])

    def list_all(self, limit: int = 100) -> List[Document]:
        return self.find(sort=[("updated_at", -1)], limit=limit)

    def append_message(self, chat_id: ObjectId, message: Document) -> Optional[Document]:
        last_message = {
            "content": message["content"],
            "sender_id": message["sender_id"],
            "timestamp": message["timestamp"],
        }
        return self.collection.find_one_and_update(
            {"_id": chat_id},
            {
                "$push": {"messages": message},
                "$set": {"last_message": last_message, "updated_at": message["timestamp"]},
            },
            return_document=ReturnDocument.AFTER,
        )

    def replace_messages(self, chat_id: ObjectId, messages: List[Document]) -> None:
        self.collection.update_one({"_id": chat_id}, {"$set": {"messages": messages}})

    def delete_for_participant(self, user_id: ObjectId) -> int:
        return self.collection.delete_many({"participants": user_id}).deleted_count


class BugReportRepository(OwnedRepository):
    collection_name = "bug_reports"
