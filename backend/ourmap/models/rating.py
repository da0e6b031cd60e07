"""EventRating ORM model — one rating per (event, user)."""
import uuid
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from ourmap.database import Base
from ourmap.utils import utcnow


class EventRating(Base):
    __tablename__ = "event_ratings"
    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_ratings_event_user"),
        CheckConstraint("organizer_rating BETWEEN 1 AND 5", name="ck_event_ratings_organizer_range"),
        CheckConstraint("event_rating BETWEEN 1 AND 5", name="ck_event_ratings_event_range"),
    )

    rating_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    organizer_rating = Column(Integer, nullable=False)
    event_rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    event = relationship("Event", back_populates="ratings")
