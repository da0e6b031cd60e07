"""Pydantic schemas for Friendships."""
from __future__ import annotations
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

from ourmap.models.friendship import FriendshipStatus
from ourmap.schemas.user import UserPublicOut


class FriendRequestCreate(BaseModel):
    addressee_id: Optional[str] = None
    username: Optional[str] = None


class FriendRequestRespond(BaseModel):
    status: Literal["accepted", "declined"]


class FriendshipOut(BaseModel):
    friendship_id: str
    requester_id: str
    addressee_id: str
    status: FriendshipStatus
    created_at: datetime
    requester: Optional[UserPublicOut] = None

    model_config = {"from_attributes": True}


class ContactsMatchPayload(BaseModel):
    contacts: list[str] = Field(..., max_length=1000)


class ContactMatchOut(UserPublicOut):
    friendship_status: Literal["friends", "pending", "none"]
