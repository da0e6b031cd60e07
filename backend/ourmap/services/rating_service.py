"""Event ratings — eligibility, creation and lookups.

A user may rate an event once, after it has started, and only if they
marked themselves as attending.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ourmap.models.event import Event
from ourmap.models.rating import EventRating
from ourmap.services import aggregates
from ourmap.models.attendee import AttendanceStatus
from ourmap.services.domain_events import EventRated, publish
from ourmap.utils import as_utc, utcnow

logger = logging.getLogger(__name__)

REASON_NOT_FOUND = "event not found"
REASON_NOT_ENDED = "only after it ends"
REASON_NOT_ATTENDEE = "only attendees may rate"
REASON_ALREADY_RATED = "already rated"


@dataclass
class RatingEligibility:
    can_rate: bool
    reason: Optional[str] = None


def get_user_event_rating(db: Session, event_id: str, user_id: str) -> Optional[EventRating]:
    return (
        db.query(EventRating)
        .filter(EventRating.event_id == event_id, EventRating.user_id == user_id)
        .first()
    )


def can_user_rate_event(db: Session, event_id: str, user_id: str) -> RatingEligibility:
    event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event:
        return RatingEligibility(False, REASON_NOT_FOUND)
    if as_utc(event.date_time) > utcnow():
        return RatingEligibility(False, REASON_NOT_ENDED)

    attendance = aggregates.get_attendance(db, event_id, user_id)
    if attendance is None or attendance.status != AttendanceStatus.attending:
        return RatingEligibility(False, REASON_NOT_ATTENDEE)
    if get_user_event_rating(db, event_id, user_id):
        return RatingEligibility(False, REASON_ALREADY_RATED)
    return RatingEligibility(True)


def create_rating(
    db: Session,
    event_id: str,
    user_id: str,
    organizer_rating: int,
    event_rating: int,
    comment: Optional[str] = None,
) -> EventRating:
    eligibility = can_user_rate_event(db, event_id, user_id)
    if not eligibility.can_rate:
        code = 404 if eligibility.reason == REASON_NOT_FOUND else 400
        raise HTTPException(status_code=code, detail=f"Cannot rate event: {eligibility.reason}")

    rating = EventRating(
        event_id=event_id,
        user_id=user_id,
        organizer_rating=organizer_rating,
        event_rating=event_rating,
        comment=comment,
    )
    db.add(rating)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail=f"Cannot rate event: {REASON_ALREADY_RATED}")
    db.refresh(rating)
    logger.info("User %s rated event %s (%d/%d)", user_id, event_id, event_rating, organizer_rating)

    publish(db, EventRated(actor_id=user_id, event_id=event_id, rating_id=rating.rating_id))
    return rating


def list_event_ratings(db: Session, event_id: str) -> list[EventRating]:
    return (
        db.query(EventRating)
        .filter(EventRating.event_id == event_id)
        .order_by(EventRating.created_at.desc())
        .all()
    )
