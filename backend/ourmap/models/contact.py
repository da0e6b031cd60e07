"""Uploaded address-book entries, stored as keyed phone digests."""
import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from ourmap.database import Base
from ourmap.utils import utcnow


class UserContact(Base):
    __tablename__ = "user_contacts"
    __table_args__ = (UniqueConstraint("owner_id", "phone_digest", name="uq_contact_owner_digest"),)

    contact_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    phone_digest = Column(String(64), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
