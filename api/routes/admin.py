"""Administrator routes: statistics, user management and broadcasts"""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from pymongo.database import Database
import logging

from api.dependencies import get_db, require_admin
from domain.mappers import DocumentMapper, UserMapper
from domain.schemas.notification_schemas import (
    AdminNotificationSend,
    AdminUpdateSend,
    NotificationContent,
    UpdateContent,
)
from domain.schemas.user_schemas import AdminUserUpdate
from services.admin_service import AdminService

router = APIRouter(prefix="/admin", tags=["Admin"])
logger = logging.getLogger("lifetrack.api.admin")


@router.get("/stats")
def get_stats(admin: Dict[str, Any] = Depends(require_admin), db: Database = Depends(get_db)):
    """User statistics for the admin dashboard"""
    return AdminService.get_stats(db)


@router.get("/users/{user_id}")
def get_user(user_id: str, admin: Dict[str, Any] = Depends(require_admin), db: Database = Depends(get_db)):
    return UserMapper.to_response(AdminService.get_user(db, user_id))


@router.put("/users/{user_id}")
def update_user(
    user_id: str,
    payload: AdminUserUpdate,
    admin: Dict[str, Any] = Depends(require_admin),
    db: Database = Depends(get_db),
):
    return UserMapper.to_response(AdminService.update_user(db, user_id, payload))


@router.delete("/users/{user_id}")
def delete_user(user_id: str, admin: Dict[str, Any] = Depends(require_admin), db: Database = Depends(get_db)):
    """Delete a user and everything they own"""
    deleted = AdminService.delete_user(db, user_id)
    logger.info(f"Admin {admin['_id']} deleted user {user_id}")
    return {"message": "User deleted successfully", "deleted": deleted}


@router.post("/notifications/send")
def send_notifications(
    payload: AdminNotificationSend,
    admin: Dict[str, Any] = Depends(require_admin),
    db: Database = Depends(get_db),
):
    sent = AdminService.send_notifications(db, admin, payload)
    return {"message": f"Notification sent to {sent} users", "sent_count": sent}


@router.post("/notifications/send-all")
def send_notification_to_all(
    payload: NotificationContent,
    admin: Dict[str, Any] = Depends(require_admin),
    db: Database = Depends(get_db),
):
    sent = AdminService.send_notification_to_all(db, admin, payload)
    return {"message": f"Notification sent to {sent} users", "sent_count": sent}


@router.post("/updates/send")
def send_updates(
    payload: AdminUpdateSend,
    admin: Dict[str, Any] = Depends(require_admin),
    db: Database = Depends(get_db),
):
    sent = AdminService.send_updates(db, admin, payload)
    return {"message": f"Update sent to {sent} users", "sent_count": sent}


@router.post("/updates/send-all")
def send_update_to_all(
    payload: UpdateContent,
    admin: Dict[str, Any] = Depends(require_admin),
    db: Database = Depends(get_db),
):
    sent = AdminService.send_update_to_all(db, admin, payload)
    return {"message": f"Update sent to {sent} users", "sent_count": sent}


@router.get("/chats")
def list_chats(admin: Dict[str, Any] = Depends(require_admin), db: Database = Depends(get_db)):
    """All chats, most recently active first"""
    return {"chats": [DocumentMapper.to_response(c) for c in AdminService.list_chats(db)]}
