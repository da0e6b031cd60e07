"""Notification ORM model — written as a side effect of other mutations."""
import enum
import uuid
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import relationship
from ourmap.database import Base
from ourmap.utils import utcnow


class NotificationType(str, enum.Enum):
    friend_invite = "friend_invite"
    event_attendance = "event_attendance"
    event_created = "event_created"
    event_rating = "event_rating"
    contact_joined = "contact_joined"


class Notification(Base):
    __tablename__ = "notifications"

    notification_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(SAEnum(NotificationType), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    related_user_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=True)
    related_event_id = Column(String(36), ForeignKey("events.event_id", ondelete="CASCADE"), nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    action_url = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    related_user = relationship("User", foreign_keys=[related_user_id])
    related_event = relationship("Event", foreign_keys=[related_event_id])
