"""Pydantic schemas for Events, attendance and invites."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from ourmap.models.attendee import AttendanceStatus
from ourmap.models.event import DEFAULT_CATEGORY, PriceType, RecurrenceType
from ourmap.models.invite import InviteStatus
from ourmap.schemas.user import UserPublicOut


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: str = DEFAULT_CATEGORY
    date_time: datetime
    end_time: Optional[datetime] = None
    location: str = Field(..., min_length=1, max_length=500)
    max_attendees: Optional[int] = Field(None, gt=0)
    image_url: Optional[str] = None
    icon_emoji: Optional[str] = None
    is_private: bool = False
    price_type: PriceType = PriceType.free
    price: Optional[float] = Field(None, ge=0)
    fundraising_goal: Optional[float] = Field(None, ge=0)
    minimum_contribution: Optional[float] = Field(None, ge=0)
    is_recurring: bool = False
    recurrence_type: Optional[RecurrenceType] = None
    recurrence_interval: Optional[int] = Field(None, gt=0)
    recurrence_end_date: Optional[datetime] = None
    invitee_ids: list[str] = []


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = None
    date_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    location: Optional[str] = Field(None, min_length=1, max_length=500)
    max_attendees: Optional[int] = Field(None, gt=0)
    image_url: Optional[str] = None
    icon_emoji: Optional[str] = None
    is_private: Optional[bool] = None
    price_type: Optional[PriceType] = None
    price: Optional[float] = Field(None, ge=0)
    fundraising_goal: Optional[float] = Field(None, ge=0)
    minimum_contribution: Optional[float] = Field(None, ge=0)
    is_recurring: Optional[bool] = None
    recurrence_type: Optional[RecurrenceType] = None
    recurrence_interval: Optional[int] = Field(None, gt=0)
    recurrence_end_date: Optional[datetime] = None


class EventOut(BaseModel):
    event_id: str
    title: str
    description: Optional[str] = None
    category: str
    date_time: datetime
    end_time: Optional[datetime] = None
    location: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    creator_id: str
    max_attendees: Optional[int] = None
    image_url: Optional[str] = None
    icon_emoji: Optional[str] = None
    is_private: bool
    shareable_link: str
    price_type: PriceType
    price: Optional[float] = None
    fundraising_goal: Optional[float] = None
    minimum_contribution: Optional[float] = None
    is_recurring: bool
    recurrence_type: Optional[RecurrenceType] = None
    recurrence_interval: Optional[int] = None
    recurrence_end_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    organizer: Optional[UserPublicOut] = None

    model_config = {"from_attributes": True}


class AttendanceOut(BaseModel):
    attendance_id: str
    event_id: str
    user_id: str
    status: AttendanceStatus
    created_at: datetime

    model_config = {"from_attributes": True}


class EventWithDetailsOut(BaseModel):
    """An event as seen by one viewer: counts, own RSVP, distance, friends."""
    event: EventOut
    attendance_count: int = 0
    user_attendance: Optional[AttendanceOut] = None
    distance: Optional[float] = None
    friends_going: list[UserPublicOut] = []

    model_config = {"from_attributes": True}


class AttendPayload(BaseModel):
    status: AttendanceStatus = AttendanceStatus.attending


class InvitePayload(BaseModel):
    user_ids: list[str] = Field(..., min_length=1)


class InviteOut(BaseModel):
    invite_id: str
    event_id: str
    user_id: str
    status: InviteStatus
    created_at: datetime
    event: Optional[EventOut] = None

    model_config = {"from_attributes": True}
