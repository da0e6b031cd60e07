"""Pydantic schemas for Notifications."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from ourmap.models.notification import NotificationType
from ourmap.schemas.user import UserPublicOut


class NotificationEventOut(BaseModel):
    event_id: str
    title: str
    image_url: Optional[str] = None

    model_config = {"from_attributes": True}


class NotificationOut(BaseModel):
    notification_id: str
    type: NotificationType
    title: str
    message: str
    is_read: bool
    action_url: Optional[str] = None
    created_at: datetime
    related_user: Optional[UserPublicOut] = None
    related_event: Optional[NotificationEventOut] = None

    model_config = {"from_attributes": True}


class UnreadCountOut(BaseModel):
    count: int


class PreferenceUpdate(BaseModel):
    key: str
    value: bool
