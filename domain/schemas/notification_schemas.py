from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from domain.enums import NotificationType, UpdateType, UpdatePriority


class MarkReadRequest(BaseModel):
    id: str = Field(..., min_length=1)


class ChatCreateRequest(BaseModel):
    participant_id: str = Field(..., min_length=1)


class ChatMessageCreate(BaseModel):
    content: str = Field(..., max_length=1000)

    @field_validator("content")
    def strip_content(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("message content is required")
        return v


class NotificationContent(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    message: str = Field(..., min_length=1, max_length=500)
    type: NotificationType = NotificationType.INFO
    action_url: Optional[str] = Field(None, max_length=200)
    action_text: Optional[str] = Field(None, max_length=50)


class AdminNotificationSend(NotificationContent):
    user_ids: List[str] = Field(..., min_length=1)


class UpdateContent(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    content: str = Field(..., min_length=1, max_length=2000)
    type: UpdateType = UpdateType.FEATURE
    priority: UpdatePriority = UpdatePriority.MEDIUM
    action_url: Optional[str] = Field(None, max_length=200)
    action_text: Optional[str] = Field(None, max_length=50)


class AdminUpdateSend(UpdateContent):
    user_ids: List[str] = Field(..., min_length=1)


class BugReportCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    page_url: Optional[str] = Field(None, max_length=500)

    @field_validator("title", "description")
    def strip_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v
