"""Pydantic schemas for Users."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from ourmap.models.user import AuthType, UserRole


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone_e164: Optional[str] = None
    profile_image_url: Optional[str] = None


class UserUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    profile_image_url: Optional[str] = None


class UserPublicOut(BaseModel):
    """What other users get to see."""
    user_id: str
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None

    model_config = {"from_attributes": True}


class UserOut(UserPublicOut):
    email: Optional[str] = None
    phone_e164: Optional[str] = None
    phone_verified: bool
    auth_type: AuthType
    role: UserRole
    created_at: datetime


class UserProfileOut(UserPublicOut):
    """Public profile with stats.

    Contact fields are only populated for the user themself and their
    friends; the route drops them when unset.
    """
    events_created: int = 0
    events_attended: int = 0
    friends_count: int = 0
    average_rating: Optional[float] = None
    email: Optional[str] = None
    phone_e164: Optional[str] = None


class OrganizerRatingOut(BaseModel):
    average: float
    total_ratings: int

    model_config = {"from_attributes": True}
