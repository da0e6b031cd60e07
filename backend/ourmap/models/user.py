"""User ORM model."""
import enum
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Enum as SAEnum
from sqlalchemy.sql import func
from ourmap.database import Base
from ourmap.utils import utcnow


class UserRole(str, enum.Enum):
    user = "user"
    admin = "admin"
    super_admin = "super_admin"


class AuthType(str, enum.Enum):
    local = "local"
    phone = "phone"
    federated = "federated"


# Preference flag per notification kind; keys are the public names used by the API.
NOTIFICATION_PREFERENCES = (
    "notify_friend_request",
    "notify_friend_event",
    "notify_friend_rating",
    "notify_contact_joined",
    "notify_attendance",
    "notify_event_rated",
)


class User(Base):
    __tablename__ = "users"

    user_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(50), nullable=False, unique=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True, unique=True)
    password_hash = Column(String(255), nullable=True)
    phone_e164 = Column(String(20), nullable=True, unique=True)
    phone_verified = Column(Boolean, nullable=False, default=False)
    auth_type = Column(SAEnum(AuthType), nullable=False, default=AuthType.local)
    role = Column(SAEnum(UserRole), nullable=False, default=UserRole.user)
    profile_image_url = Column(String(500), nullable=True)

    notify_friend_request = Column(Boolean, nullable=False, default=True)
    notify_friend_event = Column(Boolean, nullable=False, default=True)
    notify_friend_rating = Column(Boolean, nullable=False, default=True)
    notify_contact_joined = Column(Boolean, nullable=False, default=True)
    notify_attendance = Column(Boolean, nullable=False, default=True)
    notify_event_rated = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow)
