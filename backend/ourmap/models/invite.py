"""EventInvite ORM model — invitations to private events."""
import enum
import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, Enum as SAEnum
from sqlalchemy.orm import relationship
from ourmap.database import Base
from ourmap.utils import utcnow


class InviteStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    declined = "declined"


class EventInvite(Base):
    __tablename__ = "event_invites"
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_event_invites_event_user"),)

    invite_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(SAEnum(InviteStatus), nullable=False, default=InviteStatus.pending)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    event = relationship("Event", back_populates="invites")
