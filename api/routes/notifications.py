"""Notification, product update, chat and bug report routes"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pymongo.database import Database
import logging

from api.dependencies import get_current_user, get_db
from domain.mappers import DocumentMapper
from domain.schemas.notification_schemas import (
    BugReportCreate,
    ChatCreateRequest,
    ChatMessageCreate,
    MarkReadRequest,
)
from services.notification_service import (
    BugReportService,
    ChatService,
    NotificationService,
    UpdateService,
)

router = APIRouter(tags=["Notifications"])
logger = logging.getLogger("lifetrack.api.notifications")


@router.get("/notifications")
def list_notifications(user: Dict[str, Any] = Depends(get_current_user), db: Database = Depends(get_db)):
    """Newest 50 notifications and the unread count"""
    items, unread = NotificationService.list(db, user)
    return {"notifications": [DocumentMapper.to_response(n) for n in items], "unread_count": unread}


@router.post("/notifications/mark-read")
def mark_notification_read(
    payload: MarkReadRequest,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    item = NotificationService.mark_read(db, user, payload.id)
    return {"message": "Notification marked as read", "notification": DocumentMapper.to_response(item)}


@router.get("/notifications/updates")
def list_updates(user: Dict[str, Any] = Depends(get_current_user), db: Database = Depends(get_db)):
    """Newest 50 product updates and the unread count"""
    items, unread = UpdateService.list(db, user)
    return {"updates": [DocumentMapper.to_response(u) for u in items], "unread_count": unread}


@router.post("/notifications/updates/mark-read")
def mark_update_read(
    payload: MarkReadRequest,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    item = UpdateService.mark_read(db, user, payload.id)
    return {"message": "Update marked as read", "update": DocumentMapper.to_response(item)}


# ---------------------------------------------------------------------------
# Chats
# ---------------------------------------------------------------------------


@router.get("/notifications/chats")
def list_chats(user: Dict[str, Any] = Depends(get_current_user), db: Database = Depends(get_db)):
    """The user's chats, most recently active first"""
    return {"chats": [DocumentMapper.to_response(c) for c in ChatService.list_chats(db, user)]}


@router.post("/notifications/chats")
def start_chat(
    payload: ChatCreateRequest,
    response: Response,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Return the existing chat with a user (200) or start a new one (201)"""
    chat, created = ChatService.get_or_create(db, user, payload.participant_id)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return {"chat": DocumentMapper.to_response(chat), "created": created}


@router.get("/notifications/chats/{chat_id}/messages")
def get_messages(
    chat_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return DocumentMapper.to_response(ChatService.get_messages(db, user, chat_id))


@router.post("/notifications/chats/{chat_id}/messages", status_code=status.HTTP_201_CREATED)
def send_message(
    chat_id: str,
    payload: ChatMessageCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    message = ChatService.send_message(db, user, chat_id, payload.content)
    return {"message": DocumentMapper.to_response(message)}


@router.post("/notifications/chats/{chat_id}/mark-read")
def mark_chat_read(
    chat_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Mark every message of the chat as read by the user"""
    changed = ChatService.mark_read(db, user, chat_id)
    return {"message": "Messages marked as read", "updated_count": changed}


@router.get("/notifications/search-users")
def search_users(
    q: Optional[str] = Query(None),
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Find users to chat with by email or name"""
    return {"users": ChatService.search_users(db, user, q)}


# ---------------------------------------------------------------------------
# Bug reports
# ---------------------------------------------------------------------------


@router.post("/bug-report", status_code=status.HTTP_201_CREATED)
def submit_bug_report(
    payload: BugReportCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    report = BugReportService.submit(db, user, payload)
    return {"message": "Bug report submitted successfully", "report_id": str(report["_id"])}
