"""Event ORM model."""
import enum
import secrets
import uuid
from sqlalchemy import Column, String, Text, DateTime, Integer, Float, Boolean, Numeric, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ourmap.database import Base
from ourmap.utils import utcnow


class PriceType(str, enum.Enum):
    free = "free"
    paid = "paid"
    crowdfunding = "crowdfunding"


class RecurrenceType(str, enum.Enum):
    daily = "daily"
    weekly = "weekly"
    biweekly = "biweekly"
    monthly = "monthly"


DEFAULT_CATEGORY = "outros"


def _new_shareable_link() -> str:
    return secrets.token_urlsafe(12)


class Event(Base):
    __tablename__ = "events"

    event_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=False, default=DEFAULT_CATEGORY, index=True)
    date_time = Column(DateTime(timezone=True), nullable=False, index=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
    location = Column(String(500), nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    creator_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    max_attendees = Column(Integer, nullable=True)
    image_url = Column(String(500), nullable=True)
    icon_emoji = Column(String(16), nullable=True, default="🎉")

    is_private = Column(Boolean, nullable=False, default=False)
    shareable_link = Column(String(64), nullable=False, unique=True, default=_new_shareable_link)

    price_type = Column(SAEnum(PriceType), nullable=False, default=PriceType.free)
    price = Column(Numeric(10, 2), nullable=True)
    fundraising_goal = Column(Numeric(12, 2), nullable=True)
    minimum_contribution = Column(Numeric(10, 2), nullable=True)

    # Recurrence is descriptive only; nothing expands it into instances.
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurrence_type = Column(SAEnum(RecurrenceType), nullable=True)
    recurrence_interval = Column(Integer, nullable=True, default=1)
    recurrence_end_date = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow)

    organizer = relationship("User", lazy="joined")
    attendees = relationship("EventAttendee", back_populates="event", cascade="all, delete-orphan", passive_deletes=True)
    invites = relationship("EventInvite", back_populates="event", cascade="all, delete-orphan", passive_deletes=True)
    ratings = relationship("EventRating", back_populates="event", cascade="all, delete-orphan", passive_deletes=True)
