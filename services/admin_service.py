from datetime import date, datetime, timedelta
from typing import Any, Dict, List
import logging

from pymongo.database import Database

from app.exceptions import NotFoundError, ServiceValidationError
from domain.mappers import DocumentMapper, UserMapper
from domain.schemas.notification_schemas import (
    AdminNotificationSend,
    AdminUpdateSend,
    NotificationContent,
    UpdateContent,
)
from domain.schemas.user_schemas import AdminUserUpdate
from repositories import (
    ChatRepository,
    MealRepository,
    NotificationRepository,
    UpdateRepository,
    UserRepository,
    WorkoutEntryRepository,
)
from services.user_service import UserService

logger = logging.getLogger("lifetrack.services.admin")

ACTIVE_WINDOW_DAYS = 7
ADMIN_CHAT_LIMIT = 100


class AdminService:
    @staticmethod
    def get_stats(db: Database) -> Dict[str, Any]:
        """
        User statistics for the admin dashboard.

        Active users are those with a meal or workout entry dated within the
        last 7 days.
        """
        user_repo = UserRepository(db)
        users = user_repo.list_all()
        now = datetime.utcnow()
        month_start = datetime(now.year, now.month, 1)
        since = (date.today() - timedelta(days=ACTIVE_WINDOW_DAYS)).isoformat()

        active = set(MealRepository(db).users_active_since(since))
        active.update(WorkoutEntryRepository(db).users_active_since(since))
        existing = {u["_id"] for u in users}

        ages = [a for a in (UserMapper.age(u) for u in users) if a is not None]
        genders = {"male": 0, "female": 0, "other": 0}
        for user in users:
            if user.get("gender") in genders:
                genders[user["gender"]] += 1

        return {
            "total_users": len(users),
            "new_users_this_month": user_repo.count_created_since(month_start),
            "active_users_this_week": len(active & existing),
            "average_age": round(sum(ages) / len(ages)) if ages else None,
            "gender_distribution": genders,
            "users": [UserMapper.to_response(u) for u in users],
        }

    @staticmethod
    def get_user(db: Database, user_id: str) -> Dict[str, Any]:
        user = UserRepository(db).get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def update_user(db: Database, user_id: str, data: AdminUserUpdate) -> Dict[str, Any]:
        fields = DocumentMapper.to_storage(data.model_dump(exclude_unset=True, exclude_none=True))
        repo = UserRepository(db)
        if "email" in fields:
            fields["email"] = fields["email"].lower().strip()
            other = repo.get_by_email(fields["email"])
            if other and str(other["_id"]) != user_id:
                raise ServiceValidationError("Email already in use")
        user = repo.update_by_id(user_id, fields) if fields else repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        logger.info("Admin updated user %s fields %s", user_id, sorted(fields))
        return user

    @staticmethod
    def delete_user(db: Database, user_id: str) -> Dict[str, int]:
        user = AdminService.get_user(db, user_id)
        return UserService.delete_account(db, user["_id"])

    @staticmethod
    def _recipients(db: Database, user_ids: List[str]) -> List[Any]:
        unique_ids = list(dict.fromkeys(user_ids))
        users = UserRepository(db).get_many(unique_ids)
        if len(users) != len(unique_ids):
            raise ServiceValidationError("Some users not found")
        return [u["_id"] for u in users]

    @staticmethod
    def _all_recipients(db: Database) -> List[Any]:
        ids = UserRepository(db).list_ids()
        if not ids:
            raise ServiceValidationError("No users found")
        return ids

    @staticmethod
    def _fan_out(repo, recipients: List[Any], content: Dict[str, Any], admin: Dict[str, Any]) -> int:
        documents = []
        for user_id in recipients:
            document = dict(content)
            document.update({"user_id": user_id, "is_read": False, "read_at": None, "sent_by": admin["_id"]})
            documents.append(document)
        return len(repo.create_many(documents))

    @staticmethod
    def send_notifications(db: Database, admin: Dict[str, Any], data: AdminNotificationSend) -> int:
        recipients = AdminService._recipients(db, data.user_ids)
        content = DocumentMapper.to_storage(data.model_dump(exclude={"user_ids"}))
        sent = AdminService._fan_out(NotificationRepository(db), recipients, content, admin)
        logger.info("Admin %s sent notification to %d users", admin["_id"], sent)
        return sent

    @staticmethod
    def send_notification_to_all(db: Database, admin: Dict[str, Any], data: NotificationContent) -> int:
        recipients = AdminService._all_recipients(db)
        content = DocumentMapper.to_storage(data.model_dump())
        sent = AdminService._fan_out(NotificationRepository(db), recipients, content, admin)
        logger.info("Admin %s sent notification to all %d users", admin["_id"], sent)
        return sent

    @staticmethod
    def send_updates(db: Database, admin: Dict[str, Any], data: AdminUpdateSend) -> int:
        recipients = AdminService._recipients(db, data.user_ids)
        content = DocumentMapper.to_storage(data.model_dump(exclude={"user_ids"}))
        return AdminService._fan_out(UpdateRepository(db), recipients, content, admin)

    @staticmethod
    def send_update_to_all(db: Database, admin: Dict[str, Any], data: UpdateContent) -> int:
        recipients = AdminService._all_recipients(db)
        content = DocumentMapper.to_storage(data.model_dump())
        return AdminService._fan_out(UpdateRepository(db), recipients, content, admin)

    @staticmethod
    def list_chats(db: Database) -> List[Dict[str, Any]]:
        """All chats, most recently active first, with participant summaries."""
        chats = ChatRepository(db).list_all(ADMIN_CHAT_LIMIT)
        participant_ids = {pid for chat in chats for pid in chat.get("participants", [])}
        users = {u["_id"]: u for u in UserRepository(db).get_many(list(participant_ids))}
        result = []
        for chat in chats:
            chat = dict(chat)
            chat["participants"] = [
                UserMapper.to_summary(users[pid]) for pid in chat.get("participants", []) if pid in users
            ]
            chat["message_count"] = len(chat.get("messages", []))
            result.append(chat)
        return result
