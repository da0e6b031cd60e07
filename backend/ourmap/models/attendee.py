"""EventAttendee ORM model — a user's RSVP against an event."""
import enum
import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, Enum as SAEnum
from sqlalchemy.orm import relationship
from ourmap.database import Base
from ourmap.utils import utcnow


class AttendanceStatus(str, enum.Enum):
    attending = "attending"
    interested = "interested"
    not_going = "not_going"


class EventAttendee(Base):
    __tablename__ = "event_attendees"
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_event_attendees_event_user"),)

    attendance_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(SAEnum(AttendanceStatus), nullable=False, default=AttendanceStatus.attending)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    event = relationship("Event", back_populates="attendees")
