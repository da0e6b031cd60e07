"""Read-side aggregations — friends, attendance counts, rating averages.

These are the join-heavy derived values attached to users and events:
friend lists (friendship is symmetric once accepted, so every query checks
both directions), attendance counts, and organizer/event rating averages.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from ourmap.models.attendee import EventAttendee, AttendanceStatus
from ourmap.models.event import Event
from ourmap.models.friendship import Friendship, FriendshipStatus
from ourmap.models.rating import EventRating
from ourmap.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class UserStats:
    user: User
    events_created: int
    events_attended: int
    friends_count: int
    average_rating: Optional[float]


@dataclass
class EventRatingsAverage:
    event_average: float
    organizer_average: float
    total_ratings: int


@dataclass
class OrganizerRatingsAverage:
    average: float
    total_ratings: int


# ── Friendships ────────────────────────────────────────────────────

def _between(user_a: str, user_b: str):
    return or_(
        and_(Friendship.requester_id == user_a, Friendship.addressee_id == user_b),
        and_(Friendship.requester_id == user_b, Friendship.addressee_id == user_a),
    )


def _involving(user_id: str):
    return or_(Friendship.requester_id == user_id, Friendship.addressee_id == user_id)


def are_friends(db: Session, user_a: str, user_b: str) -> bool:
    """True iff an accepted friendship exists in either direction."""
    row = (
        db.query(Friendship.friendship_id)
        .filter(_between(user_a, user_b), Friendship.status == FriendshipStatus.accepted)
        .first()
    )
    return row is not None


def has_pending_friend_request(db: Session, user_a: str, user_b: str) -> bool:
    row = (
        db.query(Friendship.friendship_id)
        .filter(_between(user_a, user_b), Friendship.status == FriendshipStatus.pending)
        .first()
    )
    return row is not None


def friend_ids(user_id: str):
    """SELECT of the ids of ``user_id``'s accepted friends."""
    friend_id = func.coalesce(
        func.nullif(Friendship.requester_id, user_id),
        Friendship.addressee_id,
    )
    return select(friend_id).where(_involving(user_id), Friendship.status == FriendshipStatus.accepted)


def get_friends(db: Session, user_id: str) -> list[User]:
    return (
        db.query(User)
        .filter(User.user_id.in_(friend_ids(user_id)))
        .order_by(User.first_name, User.username)
        .all()
    )


def count_friends(db: Session, user_id: str) -> int:
    return (
        db.query(func.count(Friendship.friendship_id))
        .filter(_involving(user_id), Friendship.status == FriendshipStatus.accepted)
        .scalar()
    ) or 0


# ── Attendance ─────────────────────────────────────────────────────

def attendance_counts(db: Session, event_ids: Iterable[str]) -> dict[str, int]:
    """Number of ``attending`` rows per event id (missing ids count 0)."""
    event_ids = list(event_ids)
    if not event_ids:
        return {}
    rows = (
        db.query(EventAttendee.event_id, func.count(EventAttendee.attendance_id))
        .filter(
            EventAttendee.event_id.in_(event_ids),
            EventAttendee.status == AttendanceStatus.attending,
        )
        .group_by(EventAttendee.event_id)
        .all()
    )
    counts = {event_id: 0 for event_id in event_ids}
    counts.update({event_id: n for event_id, n in rows})
    return counts


def attendance_count(db: Session, event_id: str) -> int:
    return attendance_counts(db, [event_id])[event_id]


def viewer_attendances(db: Session, event_ids: Iterable[str], viewer_id: Optional[str]) -> dict[str, EventAttendee]:
    """The viewer's own attendance row per event id, when one exists."""
    event_ids = list(event_ids)
    if not viewer_id or not event_ids:
        return {}
    rows = (
        db.query(EventAttendee)
        .filter(EventAttendee.event_id.in_(event_ids), EventAttendee.user_id == viewer_id)
        .all()
    )
    return {row.event_id: row for row in rows}


def get_attendance(db: Session, event_id: str, user_id: str) -> Optional[EventAttendee]:
    return (
        db.query(EventAttendee)
        .filter(EventAttendee.event_id == event_id, EventAttendee.user_id == user_id)
        .first()
    )


def get_event_attendees(db: Session, event_id: str) -> list[User]:
    """Users whose status for the event is ``attending``."""
    return (
        db.query(User)
        .join(EventAttendee, EventAttendee.user_id == User.user_id)
        .filter(EventAttendee.event_id == event_id, EventAttendee.status == AttendanceStatus.attending)
        .order_by(EventAttendee.created_at)
        .all()
    )


def friends_going(db: Session, event_id: str, viewer_id: Optional[str]) -> list[User]:
    """The viewer's accepted friends who are attending the event."""
    if not viewer_id:
        return []
    return (
        db.query(User)
        .join(EventAttendee, EventAttendee.user_id == User.user_id)
        .filter(
            EventAttendee.event_id == event_id,
            EventAttendee.status == AttendanceStatus.attending,
            User.user_id.in_(friend_ids(viewer_id)),
        )
        .all()
    )


# ── Ratings ────────────────────────────────────────────────────────

def get_event_ratings_average(db: Session, event_id: str) -> EventRatingsAverage:
    event_avg, organizer_avg, total = (
        db.query(
            func.avg(EventRating.event_rating),
            func.avg(EventRating.organizer_rating),
            func.count(EventRating.rating_id),
        )
        .filter(EventRating.event_id == event_id)
        .one()
    )
    return EventRatingsAverage(
        event_average=float(event_avg) if event_avg is not None else 0.0,
        organizer_average=float(organizer_avg) if organizer_avg is not None else 0.0,
        total_ratings=total or 0,
    )


def get_organizer_ratings_average(db: Session, organizer_id: str) -> OrganizerRatingsAverage:
    average, total = (
        db.query(func.avg(EventRating.organizer_rating), func.count(EventRating.rating_id))
        .join(Event, Event.event_id == EventRating.event_id)
        .filter(Event.creator_id == organizer_id)
        .one()
    )
    return OrganizerRatingsAverage(
        average=float(average) if average is not None else 0.0,
        total_ratings=total or 0,
    )


# ── Users ──────────────────────────────────────────────────────────

def get_user_with_stats(db: Session, user_id: str) -> Optional[UserStats]:
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        return None

    events_created = db.query(func.count(Event.event_id)).filter(Event.creator_id == user_id).scalar() or 0
    events_attended = (
        db.query(func.count(EventAttendee.attendance_id))
        .filter(EventAttendee.user_id == user_id, EventAttendee.status == AttendanceStatus.attending)
        .scalar()
    ) or 0
    organizer = get_organizer_ratings_average(db, user_id)

    return UserStats(
        user=user,
        events_created=events_created,
        events_attended=events_attended,
        friends_count=count_friends(db, user_id),
        average_rating=organizer.average if organizer.total_ratings else None,
    )
