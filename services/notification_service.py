"""
Messaging services: admin notifications, product updates, user-to-user chats
and bug reports.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from pymongo.database import Database

from app.exceptions import ForbiddenError, NotFoundError, ServiceValidationError
from domain.mappers import UserMapper
from domain.schemas.notification_schemas import BugReportCreate
from repositories import (
    BugReportRepository,
    ChatRepository,
    NotificationRepository,
    UpdateRepository,
    UserRepository,
    to_object_id,
)

logger = logging.getLogger("lifetrack.services.notifications")

INBOX_LIMIT = 50
USER_SEARCH_LIMIT = 10


class InboxService:
    """Read side of notifications and updates; both share read-state handling."""

    repository_cls = NotificationRepository
    not_found_message = "Notification not found"

    @classmethod
    def list(cls, db: Database, user: Dict[str, Any]) -> Tuple[List[Dict[str, Any]], int]:
        """Newest 50 items and the number of unread ones."""
        repo = cls.repository_cls(db)
        return repo.list_recent(user["_id"], INBOX_LIMIT), repo.count_unread(user["_id"])

    @classmethod
    def mark_read(cls, db: Database, user: Dict[str, Any], item_id: str) -> Dict[str, Any]:
        item = cls.repository_cls(db).mark_read(item_id, user["_id"])
        if not item:
            raise NotFoundError(cls.not_found_message)
        return item


class NotificationService(InboxService):
    repository_cls = NotificationRepository
    not_found_message = "Notification not found"


class UpdateService(InboxService):
    repository_cls = UpdateRepository
    not_found_message = "Update not found"


class ChatService:
    @staticmethod
    def _participant_summaries(db: Database, participant_ids: List[ObjectId]) -> List[Dict[str, Any]]:
        users = {u["_id"]: u for u in UserRepository(db).get_many(participant_ids)}
        return [UserMapper.to_summary(users[pid]) for pid in participant_ids if pid in users]

    @staticmethod
    def _load_for_participant(db: Database, user: Dict[str, Any], chat_id: str) -> Dict[str, Any]:
        chat = ChatRepository(db).get_by_id(chat_id)
        if not chat:
            raise NotFoundError("Chat not found")
        if user["_id"] not in chat.get("participants", []):
            raise ForbiddenError("Access denied")
        return chat

    @staticmethod
    def unread_count(chat: Dict[str, Any], user_id: ObjectId) -> int:
        """Messages from other participants the user has not read yet."""
        return sum(
            1
            for m in chat.get("messages", [])
            if m.get("sender_id") != user_id and user_id not in m.get("read_by", [])
        )

    @staticmethod
    def list_chats(db: Database, user: Dict[str, Any]) -> List[Dict[str, Any]]:
        chats = ChatRepository(db).list_for_participant(user["_id"])
        return [
            {
                "_id": chat["_id"],
                "participants": ChatService._participant_summaries(db, chat.get("participants", [])),
                "last_message": chat.get("last_message"),
                "unread_count": ChatService.unread_count(chat, user["_id"]),
                "created_at": chat.get("created_at"),
                "updated_at": chat.get("updated_at"),
            }
            for chat in chats
        ]

    @staticmethod
    def get_or_create(db: Database, user: Dict[str, Any], participant_id: str) -> Tuple[Dict[str, Any], bool]:
        """
        Find the chat between the user and ``participant_id`` or start one.

        Returns:
            (chat, created)
        """
        participant_oid = to_object_id(participant_id)
        if participant_oid is None or not UserRepository(db).exists(participant_oid):
            raise NotFoundError("User not found")
        if participant_oid == user["_id"]:
            raise ServiceValidationError("Cannot start a chat with yourself")

        repo = ChatRepository(db)
        chat = repo.find_between(user["_id"], participant_oid)
        created = chat is None
        if created:
            chat = repo.create({
                "participants": [user["_id"], participant_oid],
                "messages": [],
                "last_message": None,
            })
            logger.info("Started chat %s between %s and %s", chat["_id"], user["_id"], participant_oid)
        chat = dict(chat)
        chat["participants"] = ChatService._participant_summaries(db, chat["participants"])
        return chat, created

    @staticmethod
    def get_messages(db: Database, user: Dict[str, Any], chat_id: str) -> Dict[str, Any]:
        chat = ChatService._load_for_participant(db, user, chat_id)
        return {
            "_id": chat["_id"],
            "participants": ChatService._participant_summaries(db, chat.get("participants", [])),
            "messages": chat.get("messages", []),
        }

    @staticmethod
    def send_message(db: Database, user: Dict[str, Any], chat_id: str, content: str) -> Dict[str, Any]:
        chat = ChatService._load_for_participant(db, user, chat_id)
        message = {
            "_id": ObjectId(),
            "sender_id": user["_id"],
            "content": content,
            "timestamp": datetime.utcnow(),
            "read_by": [user["_id"]],
        }
        ChatRepository(db).append_message(chat["_id"], message)
        return message

    @staticmethod
    def mark_read(db: Database, user: Dict[str, Any], chat_id: str) -> int:
        """Add the user to ``read_by`` of every message; returns how many changed."""
        chat = ChatService._load_for_participant(db, user, chat_id)
        changed = 0
        messages = chat.get("messages", [])
        for message in messages:
            read_by = message.setdefault("read_by", [])
            if user["_id"] not in read_by:
                read_by.append(user["_id"])
                changed += 1
        if changed:
            ChatRepository(db).replace_messages(chat["_id"], messages)
        return changed

    @staticmethod
    def search_users(db: Database, user: Dict[str, Any], query: Optional[str]) -> List[Dict[str, Any]]:
        term = (query or "").strip()
        if not term:
            return []
        return [UserMapper.to_summary(u) for u in UserRepository(db).search(term, user["_id"], USER_SEARCH_LIMIT)]


class BugReportService:
    @staticmethod
    def submit(db: Database, user: Dict[str, Any], data: BugReportCreate) -> Dict[str, Any]:
        report = BugReportRepository(db).create({
            "user_id": user["_id"],
            "user_email": user.get("email"),
            "title": data.title,
            "description": data.description,
            "page_url": data.page_url,
            "status": "open",
        })
        logger.warning("Bug report %s from %s: %s", report["_id"], user.get("email"), data.title)
        return report
