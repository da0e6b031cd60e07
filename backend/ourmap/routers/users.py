"""User API routes."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ourmap.database import get_db
from ourmap.models.user import User
from ourmap.schemas.user import OrganizerRatingOut, UserCreate, UserOut, UserProfileOut, UserPublicOut, UserUpdate
from ourmap.services import aggregates, contacts
from ourmap.services.domain_events import UserJoined, publish

logger = logging.getLogger(__name__)
router = APIRouter()


def _commit_unique(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Username, email or phone already in use")


def _can_see_contact(db: Session, viewer_id: Optional[str], user_id: str) -> bool:
    if not viewer_id:
        return False
    return viewer_id == user_id or aggregates.are_friends(db, viewer_id, user_id)


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    data = payload.model_dump()
    if data.get("phone_e164"):
        data["phone_e164"] = contacts.normalize_phone(data["phone_e164"])
        if not data["phone_e164"]:
            raise HTTPException(status_code=400, detail="Invalid phone number")
    user = User(**data)
    db.add(user)
    _commit_unique(db)
    db.refresh(user)
    logger.info("Created user %s (%s)", user.user_id, user.username)
    if user.phone_e164:
        publish(db, UserJoined(actor_id=user.user_id, phone_e164=user.phone_e164))
    return user


@router.get("", response_model=list[UserPublicOut])
def list_users(db: Session = Depends(get_db)):
    return db.query(User).order_by(User.created_at).all()


@router.get("/{user_id}", response_model=UserProfileOut, response_model_exclude_unset=True)
def get_user(user_id: str, viewer_id: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """Public profile with stats; email and phone only for the user and their friends."""
    stats = aggregates.get_user_with_stats(db, user_id)
    if not stats:
        raise HTTPException(status_code=404, detail="User not found")
    fields = UserPublicOut.model_validate(stats.user).model_dump()
    fields.update(
        events_created=stats.events_created,
        events_attended=stats.events_attended,
        friends_count=stats.friends_count,
        average_rating=stats.average_rating,
    )
    if _can_see_contact(db, viewer_id, user_id):
        fields.update(email=stats.user.email, phone_e164=stats.user.phone_e164)
    return UserProfileOut(**fields)


@router.patch("/{user_id}", response_model=UserOut)
def update_user(user_id: str, payload: UserUpdate, actor_user_id: str = Query(...), db: Session = Depends(get_db)):
    """Update profile fields (partial update); only the user may edit themself."""
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if actor_user_id != user_id:
        raise HTTPException(status_code=403, detail="You can only edit your own profile")
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(user, field, value)
    _commit_unique(db)
    db.refresh(user)
    logger.info("Updated user %s", user_id)
    return user


@router.get("/{user_id}/organizer-rating", response_model=OrganizerRatingOut)
def organizer_rating(user_id: str, db: Session = Depends(get_db)):
    """Average organizer rating across every event the user created."""
    if not db.query(User.user_id).filter(User.user_id == user_id).first():
        raise HTTPException(status_code=404, detail="User not found")
    return aggregates.get_organizer_ratings_average(db, user_id)
